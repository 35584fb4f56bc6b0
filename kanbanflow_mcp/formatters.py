"""Plain-text rendering of boards and tasks for tool results."""

from typing import Any

from .client import MAX_TASKS_PER_COLUMN
from .models import Board, ColumnTasks, DateEntry, Label, Subtask, Task

FINISHED = "✅"
UNFINISHED = "⬜"
PINNED = "📌"
UNPINNED = "🏷️"
COLUMN = "📂"
WARNING = "⚠️"

PREVIEW_LENGTH = 100


def truncate(text: str, limit: int = PREVIEW_LENGTH) -> str:
    """Shorten text to ``limit`` characters, marking the cut with an ellipsis."""
    return text if len(text) <= limit else f"{text[:limit]}..."


def format_board(board: Board) -> str:
    lines = [f"Board: {board.name}", "", "Columns:"]
    lines.extend(f"- {column.name} (ID: {column.unique_id})" for column in board.columns)
    if board.swimlanes:
        lines.extend(["", "Swimlanes:"])
        lines.extend(f"- {lane.name} (ID: {lane.unique_id})" for lane in board.swimlanes)
    return "\n".join(lines)


def format_task_list(tasks: list[Task]) -> str:
    if not tasks:
        return "No tasks found in this column"
    lines = ["Tasks in column:"]
    for task in tasks:
        description = f" ({task.description})" if task.description else ""
        lines.append(f"- {task.name}{description} [ID: {task.id}]")
    return "\n".join(lines)


def format_all_tasks(columns: list[ColumnTasks]) -> str:
    lines = ["All Tasks by Column:", ""]
    for column in columns:
        lines.append(f"{COLUMN} **{column.column_name}** ({len(column.tasks)} tasks):")
        if not column.tasks:
            lines.append("   - No tasks in this column")
        for number, task in enumerate(column.tasks, 1):
            line = f"   {number}. {task.name}"
            if task.color:
                line += f" [{task.color.upper()}]"
            if task.description:
                line += f" - {truncate(task.description)}"
            lines.append(f"{line} [ID: {task.id}]")
        if column.tasks_limited:
            lines.append(f"   {WARNING} This column has more tasks (limited to {MAX_TASKS_PER_COLUMN})")
        lines.append("")
    return "\n".join(lines)


def format_subtasks(subtasks: list[Subtask], highlight: int | None = None, detailed: bool = True) -> list[str]:
    """Render a numbered subtask list.

    Args:
        subtasks: The task's subtasks, in order
        highlight: Zero-based position to mark as updated
        detailed: Include assignee and due date
    """
    lines = []
    for index, subtask in enumerate(subtasks):
        status = FINISHED if subtask.finished else UNFINISHED
        line = f"  {index + 1}. {status} {subtask.name or 'Unnamed subtask'}"
        if detailed:
            if subtask.user_id:
                line += f" (assigned to: {subtask.user_id})"
            if subtask.due_date_timestamp:
                line += f" (due: {subtask.due_date_timestamp})"
        if index == highlight:
            line += " ← UPDATED"
        lines.append(line)
    return lines


def format_labels(labels: list[Label]) -> list[str]:
    return [
        f"  {index}. {PINNED if label.pinned else UNPINNED} {label.name}" for index, label in enumerate(labels, 1)
    ]


def format_dates(dates: list[DateEntry], detailed: bool = True) -> list[str]:
    lines = []
    for index, date in enumerate(dates, 1):
        line = f"  {index}. {date.date_type or 'dueDate'}: {date.due_timestamp or 'not set'}"
        if detailed:
            if date.target_column_id:
                line += f" (target column: {date.target_column_id})"
            if date.status:
                line += f" [{date.status}]"
        lines.append(line)
    return lines


def format_relations(relations: list[dict[str, Any]]) -> list[str]:
    lines = []
    for index, relation in enumerate(relations, 1):
        related_id = relation.get("taskId") or relation.get("relatedTaskId") or "unknown"
        line = f"  {index}. {relation.get('type') or 'related'}: {related_id}"
        related_name = relation.get("taskName") or relation.get("relatedTaskName")
        if related_name:
            line += f' "{related_name}"'
        if relation.get("boardId"):
            line += f" (board: {relation['boardId']})"
        lines.append(line)
    return lines


def format_custom_fields(fields: list[dict[str, Any]]) -> list[str]:
    lines = []
    for index, field in enumerate(fields, 1):
        line = f"  {index}. Field: {field.get('name') or field.get('customFieldId') or field.get('id') or 'unnamed'}"
        value = field.get("value")
        if isinstance(value, dict):
            if value.get("text") is not None:
                line += f" = {value['text']}"
            elif value.get("number") is not None:
                line += f" = {value['number']}"
        lines.append(line)
    return lines


def _task_header(task: Task) -> list[str]:
    lines = [f"- ID: {task.id}", f"- Name: {task.name}", f"- Column ID: {task.column_id}"]
    if task.swimlane_id:
        lines.append(f"- Swimlane ID: {task.swimlane_id}")
    if task.description:
        lines.append(f"- Description: {task.description}")
    if task.color:
        lines.append(f"- Color: {task.color}")
    if task.position is not None:
        lines.append(f"- Position: {task.position}")
    return lines


def format_task_details(task: Task) -> str:
    """Full dump of a task, including its sub-collections."""
    lines = ["Task Details:", *_task_header(task)]
    if task.number:
        lines.append(f"- Number: {task.number.get('prefix') or ''}{task.number.get('value', '')}")
    if task.responsible_user_id:
        lines.append(f"- Responsible User: {task.responsible_user_id}")
    if task.total_seconds_spent:
        lines.append(f"- Time Spent: {task.total_seconds_spent} seconds")
    if task.total_seconds_estimate:
        lines.append(f"- Time Estimate: {task.total_seconds_estimate} seconds")
    if task.points_estimate:
        lines.append(f"- Points Estimate: {task.points_estimate}")
    if task.grouping_date:
        lines.append(f"- Grouping Date: {task.grouping_date}")

    if task.subtasks:
        lines.append(f"- Subtasks ({len(task.subtasks)}):")
        lines.extend(format_subtasks(task.subtasks))
    if task.labels:
        lines.append(f"- Labels: {', '.join(label.name for label in task.labels)}")
    if task.dates:
        lines.append(f"- Dates ({len(task.dates)}):")
        lines.extend(format_dates(task.dates))
    if task.relations:
        lines.append(f"- Relations ({len(task.relations)}):")
        lines.extend(format_relations(task.relations))
    if task.custom_fields:
        lines.append(f"- Custom Fields ({len(task.custom_fields)}):")
        lines.extend(format_custom_fields(task.custom_fields))
    return "\n".join(lines)


def format_updated_task(task: Task) -> str:
    lines = ["Successfully updated task!", *_task_header(task)]
    if task.responsible_user_id:
        lines.append(f"- Responsible User: {task.responsible_user_id}")
    if task.total_seconds_estimate:
        lines.append(f"- Time Estimate: {task.total_seconds_estimate} seconds")
    if task.points_estimate:
        lines.append(f"- Points Estimate: {task.points_estimate}")
    if task.grouping_date:
        lines.append(f"- Grouping Date: {task.grouping_date}")
    return "\n".join(lines)
