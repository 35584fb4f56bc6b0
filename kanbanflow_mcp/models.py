"""Data model for KanbanFlow boards and tasks.

The dataclasses mirror the JSON payloads returned by the KanbanFlow API.
Subtasks and labels have no identifiers of their own: subtasks are addressed
by their position in the task's ``subTasks`` array, labels by name.
"""

from dataclasses import dataclass, field
from typing import Any

TASK_COLORS = ("yellow", "white", "red", "green", "blue", "purple", "orange", "cyan", "brown", "magenta")
POSITION_TOKENS = ("top", "bottom")


@dataclass
class Column:
    unique_id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict) -> "Column":
        return cls(unique_id=data.get("uniqueId", ""), name=data.get("name", ""))


@dataclass
class Swimlane:
    unique_id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict) -> "Swimlane":
        return cls(unique_id=data.get("uniqueId", ""), name=data.get("name", ""))


@dataclass
class Board:
    """A KanbanFlow board. Fetched fresh for every request, never cached."""

    id: str
    name: str
    columns: list[Column] = field(default_factory=list)
    swimlanes: list[Swimlane] = field(default_factory=list)
    colors: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Board":
        return cls(
            id=data.get("_id", ""),
            name=data.get("name", ""),
            columns=[Column.from_dict(c) for c in data.get("columns") or []],
            swimlanes=[Swimlane.from_dict(s) for s in data.get("swimlanes") or []],
            colors=list(data.get("colors") or []),
        )


@dataclass
class Subtask:
    name: str
    finished: bool = False
    user_id: str | None = None
    due_date_timestamp: str | None = None
    due_date_timestamp_local: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Subtask":
        return cls(
            name=data.get("name", ""),
            finished=bool(data.get("finished", False)),
            user_id=data.get("userId"),
            due_date_timestamp=data.get("dueDateTimestamp"),
            due_date_timestamp_local=data.get("dueDateTimestampLocal"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the API shape, leaving out unset optional fields."""
        data: dict[str, Any] = {"name": self.name, "finished": self.finished}
        if self.user_id is not None:
            data["userId"] = self.user_id
        if self.due_date_timestamp is not None:
            data["dueDateTimestamp"] = self.due_date_timestamp
        if self.due_date_timestamp_local is not None:
            data["dueDateTimestampLocal"] = self.due_date_timestamp_local
        return data


@dataclass
class Label:
    name: str
    pinned: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Label":
        return cls(name=data.get("name", ""), pinned=bool(data.get("pinned", False)))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "pinned": self.pinned}


@dataclass
class DateEntry:
    due_timestamp: str | None = None
    due_timestamp_local: str | None = None
    target_column_id: str | None = None
    date_type: str | None = None
    status: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "DateEntry":
        return cls(
            due_timestamp=data.get("dueTimestamp"),
            due_timestamp_local=data.get("dueTimestampLocal"),
            target_column_id=data.get("targetColumnId"),
            date_type=data.get("dateType"),
            status=data.get("status"),
        )


@dataclass
class Task:
    """A task with its ordered sub-collections.

    ``relations``, ``custom_fields`` and ``collaborators`` are kept as the raw
    dicts returned by the API since their shape is open-ended.
    """

    id: str
    name: str
    column_id: str
    swimlane_id: str | None = None
    position: int | None = None
    description: str | None = None
    color: str | None = None
    number: dict[str, Any] | None = None
    responsible_user_id: str | None = None
    total_seconds_spent: int | None = None
    total_seconds_estimate: int | None = None
    points_estimate: float | None = None
    grouping_date: str | None = None
    subtasks: list[Subtask] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    dates: list[DateEntry] = field(default_factory=list)
    relations: list[dict[str, Any]] = field(default_factory=list)
    custom_fields: list[dict[str, Any]] = field(default_factory=list)
    collaborators: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=data.get("_id", ""),
            name=data.get("name", ""),
            column_id=data.get("columnId", ""),
            swimlane_id=data.get("swimlaneId"),
            position=data.get("position"),
            description=data.get("description"),
            color=data.get("color"),
            number=data.get("number"),
            responsible_user_id=data.get("responsibleUserId"),
            total_seconds_spent=data.get("totalSecondsSpent"),
            total_seconds_estimate=data.get("totalSecondsEstimate"),
            points_estimate=data.get("pointsEstimate"),
            grouping_date=data.get("groupingDate"),
            subtasks=[Subtask.from_dict(s) for s in data.get("subTasks") or []],
            labels=[Label.from_dict(lbl) for lbl in data.get("labels") or []],
            dates=[DateEntry.from_dict(d) for d in data.get("dates") or []],
            relations=list(data.get("relations") or []),
            custom_fields=list(data.get("customFields") or []),
            collaborators=list(data.get("collaborators") or []),
        )


@dataclass
class ColumnTasks:
    """Tasks of one column as returned by a board-wide listing."""

    column_id: str
    column_name: str
    tasks: list[Task] = field(default_factory=list)
    tasks_limited: bool = False


@dataclass
class InsertedItem:
    name: str
    insert_index: int


@dataclass
class AddSubtasksResult:
    added: list[InsertedItem] = field(default_factory=list)

    @property
    def total_added(self) -> int:
        return len(self.added)


@dataclass
class CreateTaskWithSubtasksResult:
    task_id: str
    task_name: str
    added: list[InsertedItem] = field(default_factory=list)

    @property
    def total_subtasks(self) -> int:
        return len(self.added)
