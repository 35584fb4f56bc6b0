"""
KanbanFlow MCP - exposes the KanbanFlow board API as MCP tools.
"""

from .client import (
    KanbanFlowAPIError,
    KanbanFlowClient,
    KanbanFlowError,
    LabelNotFoundError,
    PartialWriteError,
    SubtaskIndexError,
)
from .logging_config import configure_logging
from .models import Board, Column, ColumnTasks, DateEntry, Label, Subtask, Swimlane, Task
from .tool_executor import ToolExecutor, ToolValidationError, validate_tool_input
from .tool_schemas import TOOLS

__all__ = [
    "KanbanFlowClient",
    "KanbanFlowError",
    "KanbanFlowAPIError",
    "SubtaskIndexError",
    "LabelNotFoundError",
    "PartialWriteError",
    "Board",
    "Column",
    "Swimlane",
    "Task",
    "Subtask",
    "Label",
    "DateEntry",
    "ColumnTasks",
    "TOOLS",
    "ToolExecutor",
    "ToolValidationError",
    "validate_tool_input",
    "configure_logging",
]
__version__ = "1.0.0"
