"""
KanbanFlow API Client implementation.
"""

import logging
from typing import Any

import httpx

from .models import (
    POSITION_TOKENS,
    AddSubtasksResult,
    Board,
    ColumnTasks,
    CreateTaskWithSubtasksResult,
    InsertedItem,
    Task,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://kanbanflow.com/api/v1"
MAX_TASKS_PER_COLUMN = 20


class KanbanFlowError(Exception):
    """Base class for errors raised by this package."""


class KanbanFlowAPIError(KanbanFlowError):
    """Exception raised for KanbanFlow API errors."""

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.append(f"(code: {self.code})")
        if self.status_code:
            parts.append(f"[HTTP {self.status_code}]")
        return " ".join(parts)


class SubtaskIndexError(KanbanFlowError):
    """Raised when a subtask position does not exist on the task."""

    def __init__(self, task_id: str, index: int, count: int):
        self.task_id = task_id
        self.index = index
        self.count = count
        if count == 0:
            detail = "the task has no subtasks"
        else:
            detail = f"valid positions are 0 to {count - 1}"
        super().__init__(f"Subtask index {index} is out of range for task {task_id}: {detail}")


class LabelNotFoundError(KanbanFlowError):
    """Raised when no label on the task has the requested name."""

    def __init__(self, task_id: str, label_name: str, available: list[str]):
        self.task_id = task_id
        self.label_name = label_name
        self.available = available
        names = ", ".join(f'"{n}"' for n in available) if available else "none"
        super().__init__(f'No label named "{label_name}" on task {task_id} (existing labels: {names})')


class PartialWriteError(KanbanFlowError):
    """Raised when a multi-step write fails after some steps were applied.

    Nothing is rolled back: the task (and every subtask in ``completed``)
    already exists on the board.
    """

    def __init__(
        self,
        task_id: str,
        completed: list[InsertedItem],
        total: int,
        cause: Exception,
        task_created: bool = False,
    ):
        self.task_id = task_id
        self.completed = completed
        self.total = total
        self.cause = cause
        self.task_created = task_created
        if task_created:
            message = (
                f"Task {task_id} was created but only {len(completed)} of {total} subtasks were added "
                f"before an error; the task and those subtasks remain on the board: {cause}"
            )
        else:
            message = (
                f"{len(completed)} of {total} subtasks were added to task {task_id} "
                f"before an error; those subtasks remain on the task: {cause}"
            )
        super().__init__(message)


def normalize_position(position: int | str) -> int | str:
    """Translate a task position into what the API expects.

    Accepts a zero-based integer, a numeric string, or one of the symbolic
    tokens "top"/"bottom" (case-insensitive).

    Raises:
        ValueError: If the position can't be interpreted
    """
    if isinstance(position, bool):
        raise ValueError(f"Invalid position: {position!r}")
    if isinstance(position, int):
        if position < 0:
            raise ValueError(f"Position must be zero or greater, got {position}")
        return position
    if isinstance(position, str):
        token = position.strip().lower()
        if token in POSITION_TOKENS:
            return token
        if token.isdigit():
            return int(token)
    raise ValueError(f"Invalid position: {position!r} (use a number, 'top' or 'bottom')")


def _error_message(response: httpx.Response) -> str:
    """Extract a readable message from a KanbanFlow error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or "Unknown error"

    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
            return "; ".join(messages)
        for key in ("message", "error"):
            if data.get(key):
                return str(data[key])
    return response.text or "Unknown error"


def _response_field(result: Any, key: str) -> Any:
    """Return ``result[key]`` from a successful response.

    Raises:
        KanbanFlowAPIError: If the response body has no such field
    """
    if not isinstance(result, dict) or key not in result:
        raise KanbanFlowAPIError(message=f"Response is missing {key}", code="INVALID_RESPONSE")
    return result[key]


class KanbanFlowClient:
    """
    Async Python client for the KanbanFlow board API.

    A KanbanFlow API token is scoped to a single board, so there are no
    board identifiers in the method signatures.

    Example:
        >>> async with KanbanFlowClient(token="a1b2c3...") as client:
        ...     board = await client.get_board()
        ...     print(board.name)
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the KanbanFlow API client.

        Args:
            token: The board API token
            base_url: The base URL of the KanbanFlow API
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=httpx.BasicAuth("apiToken", token),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "KanbanFlowClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an API request.

        Failed requests are not retried.

        Args:
            method: HTTP method (GET, POST)
            path: API path (e.g., "/tasks")
            json: JSON body for POST requests
            params: Query string parameters

        Returns:
            The decoded JSON response, or an empty dict for empty bodies

        Raises:
            KanbanFlowAPIError: If the request fails or the API returns an error
        """
        logger.debug(f"{method} {path}")
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.RequestError as e:
            raise KanbanFlowAPIError(f"Request failed: {e}", code="REQUEST_ERROR") from e

        if response.status_code >= 400:
            raise KanbanFlowAPIError(message=_error_message(response), status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise KanbanFlowAPIError(
                message="Invalid JSON response",
                code="INVALID_RESPONSE",
                status_code=response.status_code,
            ) from e

    # =========================================================================
    # Board Methods
    # =========================================================================

    async def get_board(self) -> Board:
        """
        Get the board structure: columns, swimlanes and colors.

        Returns:
            Board with its ordered columns
        """
        return Board.from_dict(await self._request("GET", "/board"))

    # =========================================================================
    # Task Methods
    # =========================================================================

    async def create_task(
        self,
        name: str,
        column_id: str,
        *,
        description: str | None = None,
        color: str | None = None,
        position: int | str | None = None,
        swimlane_id: str | None = None,
    ) -> str:
        """
        Create a new task in a column.

        Args:
            name: Task name
            column_id: uniqueId of the column
            description: Task description (optional)
            color: One of the ten task colors (optional)
            position: Zero-based position, "top" or "bottom" (optional)
            swimlane_id: uniqueId of the swimlane (optional)

        Returns:
            The id of the new task
        """
        data: dict[str, Any] = {"name": name, "columnId": column_id}
        if description is not None:
            data["description"] = description
        if color is not None:
            data["color"] = color
        if position is not None:
            data["position"] = normalize_position(position)
        if swimlane_id is not None:
            data["swimlaneId"] = swimlane_id

        result = await self._request("POST", "/tasks", json=data)
        return _response_field(result, "taskId")

    async def get_tasks_by_column(self, column_id: str) -> list[Task]:
        """
        List the tasks in a column.

        Args:
            column_id: uniqueId of the column

        Returns:
            Tasks in column order
        """
        result = await self._request("GET", "/tasks", params={"columnId": column_id})
        tasks: list[Task] = []
        for column in result:
            tasks.extend(Task.from_dict(t) for t in column.get("tasks") or [])
        return tasks

    async def get_all_tasks(self) -> list[ColumnTasks]:
        """
        List the tasks of every column on the board.

        Each column returns at most MAX_TASKS_PER_COLUMN tasks; ``tasks_limited``
        is set when the column holds more than that.

        Returns:
            One ColumnTasks per column, in board order
        """
        result = await self._request("GET", "/tasks")
        columns = []
        for column in result:
            tasks = [Task.from_dict(t) for t in column.get("tasks") or []]
            limited = bool(column.get("tasksLimited")) or len(tasks) > MAX_TASKS_PER_COLUMN
            columns.append(
                ColumnTasks(
                    column_id=column.get("columnId", ""),
                    column_name=column.get("columnName", ""),
                    tasks=tasks[:MAX_TASKS_PER_COLUMN],
                    tasks_limited=limited,
                )
            )
        return columns

    async def get_task_details(self, task_id: str, include_position: bool = False) -> Task:
        """
        Get a task with its subtasks, labels, dates and relations.

        Args:
            task_id: The task id
            include_position: Ask the API to include the task's position in its column

        Returns:
            The task
        """
        params = {"includePosition": "true"} if include_position else None
        return Task.from_dict(await self._request("GET", f"/tasks/{task_id}", params=params))

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> None:
        """
        Update task fields.

        Only the keys present in ``updates`` are sent; absent keys are left
        untouched on the board.

        Args:
            task_id: The task id
            updates: Field values keyed by API name (name, columnId, color, ...)
        """
        data = dict(updates)
        if "position" in data:
            data["position"] = normalize_position(data["position"])
        await self._request("POST", f"/tasks/{task_id}", json=data)

    # =========================================================================
    # Subtask Methods
    # =========================================================================

    async def add_subtask(self, task_id: str, subtask: dict[str, Any]) -> int:
        """
        Append a subtask to a task.

        Args:
            task_id: The task id
            subtask: Subtask fields (name, finished, userId, dueDateTimestamp, dueDateTimestampLocal)

        Returns:
            The position the subtask was inserted at

        Raises:
            KanbanFlowAPIError: If the request fails or the response has no insertIndex
        """
        result = await self._request("POST", f"/tasks/{task_id}/subtasks", json=subtask)
        return _response_field(result, "insertIndex")

    async def update_subtask_by_position(self, task_id: str, index: int, updates: dict[str, Any]) -> None:
        """
        Update the subtask at a zero-based position.

        The API has no subtask identifiers, so this reads the task, patches one
        element of its subtask array and writes the whole array back. The read
        and the write are not atomic: an edit made by someone else in between
        is overwritten (last writer wins).

        Args:
            task_id: The task id
            index: Zero-based position of the subtask
            updates: Fields to change; a None value clears the field

        Raises:
            SubtaskIndexError: If there is no subtask at ``index`` (nothing is written)
        """
        task = await self.get_task_details(task_id)
        if index < 0 or index >= len(task.subtasks):
            raise SubtaskIndexError(task_id, index, len(task.subtasks))

        subtasks = [s.to_dict() for s in task.subtasks]
        for key, value in updates.items():
            if value is None:
                subtasks[index].pop(key, None)
            else:
                subtasks[index][key] = value

        await self._request("POST", f"/tasks/{task_id}", json={"subTasks": subtasks})

    async def add_subtasks(self, task_id: str, subtasks: list[dict[str, Any]]) -> AddSubtasksResult:
        """
        Append several subtasks, one request each, in the given order.

        Args:
            task_id: The task id
            subtasks: Subtask field dicts

        Returns:
            The insertion position of each subtask

        Raises:
            PartialWriteError: If a request fails; earlier subtasks stay on the task
        """
        added = await self._append_subtasks(task_id, subtasks, task_created=False)
        return AddSubtasksResult(added=added)

    async def _append_subtasks(
        self,
        task_id: str,
        subtasks: list[dict[str, Any]],
        task_created: bool,
    ) -> list[InsertedItem]:
        added: list[InsertedItem] = []
        for subtask in subtasks:
            try:
                index = await self.add_subtask(task_id, subtask)
            except KanbanFlowAPIError as e:
                raise PartialWriteError(task_id, added, len(subtasks), e, task_created=task_created) from e
            added.append(InsertedItem(name=subtask["name"], insert_index=index))
        return added

    # =========================================================================
    # Label Methods
    # =========================================================================

    async def add_label(self, task_id: str, label: dict[str, Any]) -> int:
        """
        Append a label to a task.

        Args:
            task_id: The task id
            label: Label fields (name, pinned)

        Returns:
            The position the label was inserted at
        """
        result = await self._request("POST", f"/tasks/{task_id}/labels", json=label)
        return _response_field(result, "insertIndex")

    async def update_label(self, task_id: str, label_name: str, updates: dict[str, Any]) -> None:
        """
        Update the first label whose name equals ``label_name`` (case-sensitive).

        Like update_subtask_by_position this is a read-modify-write of the
        whole label array; the last writer wins.

        Args:
            task_id: The task id
            label_name: Current name of the label
            updates: Fields to change (name, pinned)

        Raises:
            LabelNotFoundError: If no label has that name (nothing is written)
        """
        task = await self.get_task_details(task_id)
        labels = [lbl.to_dict() for lbl in task.labels]
        position = next((i for i, lbl in enumerate(task.labels) if lbl.name == label_name), None)
        if position is None:
            raise LabelNotFoundError(task_id, label_name, [lbl.name for lbl in task.labels])

        labels[position].update(updates)
        await self._request("POST", f"/tasks/{task_id}", json={"labels": labels})

    # =========================================================================
    # Date / Custom Field Methods
    # =========================================================================

    async def set_task_due_date(self, task_id: str, date: dict[str, Any]) -> None:
        """
        Set a due date on a task.

        Args:
            task_id: The task id
            date: dueTimestamp and targetColumnId, optionally dueTimestampLocal,
                dateType and status. Missing values default to dueTimestamp,
                "dueDate" and "active" respectively.
        """
        data = dict(date)
        data.setdefault("dueTimestampLocal", data["dueTimestamp"])
        data.setdefault("dateType", "dueDate")
        data.setdefault("status", "active")
        await self._request("POST", f"/tasks/{task_id}/dates", json=data)

    async def update_custom_field(self, task_id: str, custom_field_id: str, value: dict[str, Any]) -> None:
        """
        Set a custom field value.

        Args:
            task_id: The task id
            custom_field_id: The custom field id
            value: {"text": ...} and/or {"number": ...}
        """
        await self._request(
            "POST",
            f"/tasks/{task_id}/custom-fields/{custom_field_id}",
            json={"value": value},
        )

    # =========================================================================
    # Comment Methods
    # =========================================================================

    async def add_comment(self, task_id: str, comment: dict[str, Any]) -> str:
        """
        Add a comment to a task.

        Args:
            task_id: The task id
            comment: text, optionally authorUserId and createdTimestamp

        Returns:
            The id of the new comment
        """
        result = await self._request("POST", f"/tasks/{task_id}/comments", json=comment)
        return _response_field(result, "taskCommentId")

    async def update_comment(self, task_id: str, comment_id: str, updates: dict[str, Any]) -> None:
        """
        Update a comment.

        Args:
            task_id: The task id
            comment_id: The comment id
            updates: Any of text, authorUserId, createdTimestamp, updatedTimestamp
        """
        await self._request("POST", f"/tasks/{task_id}/comments/{comment_id}", json=updates)

    # =========================================================================
    # Composite Methods
    # =========================================================================

    async def create_task_with_subtasks(
        self,
        name: str,
        column_id: str,
        subtasks: list[dict[str, Any]],
        *,
        description: str | None = None,
        color: str | None = None,
        position: int | str | None = None,
    ) -> CreateTaskWithSubtasksResult:
        """
        Create a task, then append its subtasks one at a time in order.

        There is no rollback: if a subtask request fails, the task and the
        subtasks added before it remain on the board.

        Returns:
            The new task id and the insertion position of each subtask

        Raises:
            PartialWriteError: If a subtask request fails after the task was created
        """
        task_id = await self.create_task(name, column_id, description=description, color=color, position=position)
        added = await self._append_subtasks(task_id, subtasks, task_created=True)
        return CreateTaskWithSubtasksResult(task_id=task_id, task_name=name, added=added)
