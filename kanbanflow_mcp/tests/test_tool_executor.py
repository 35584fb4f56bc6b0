"""Tests for tool argument validation and execution."""

from unittest.mock import AsyncMock

import httpx
import pytest

from kanbanflow_mcp.client import (
    KanbanFlowAPIError,
    KanbanFlowClient,
    LabelNotFoundError,
    PartialWriteError,
    SubtaskIndexError,
)
from kanbanflow_mcp.models import (
    AddSubtasksResult,
    Board,
    Column,
    ColumnTasks,
    CreateTaskWithSubtasksResult,
    InsertedItem,
    Label,
    Subtask,
    Task,
)
from kanbanflow_mcp.tool_executor import TOOL_VERBS, ToolExecutor, ToolValidationError, validate_tool_input
from kanbanflow_mcp.tool_schemas import TOOLS


def _task(**overrides) -> Task:
    data = {"id": "T1", "name": "Task one", "column_id": "C1"}
    data.update(overrides)
    return Task(**data)


@pytest.fixture
def mock_client():
    """Create a mock KanbanFlowClient."""
    client = AsyncMock()
    client.get_task_details.return_value = _task()
    return client


@pytest.fixture
def executor(mock_client):
    return ToolExecutor(mock_client)


class TestCatalog:
    """Tests for the declared tool catalog."""

    def test_tool_names(self):
        assert [t["name"] for t in TOOLS] == [
            "get-board",
            "create-task",
            "get-tasks",
            "get-task-details",
            "update-task",
            "get-all-tasks",
            "add-subtask",
            "update-subtask-by-position",
            "add-label",
            "update-label",
            "set-task-due-date",
            "update-custom-field",
            "add-comment",
            "update-comment",
            "add-subtasks",
            "create-task-with-subtasks",
        ]

    def test_every_tool_has_a_failure_verb(self):
        assert set(TOOL_VERBS) == {t["name"] for t in TOOLS}

    def test_required_fields_are_declared(self):
        for tool in TOOLS:
            schema = tool["input_schema"]
            assert set(schema.get("required", [])) <= set(schema["properties"]), tool["name"]


class TestValidation:
    """Tests for validate_tool_input."""

    def test_missing_required(self):
        with pytest.raises(ToolValidationError, match="Missing required parameter\\(s\\): columnId"):
            validate_tool_input("create-task", {"name": "x"})

    def test_unknown_parameter(self):
        with pytest.raises(ToolValidationError, match="Unknown parameter\\(s\\): colour"):
            validate_tool_input("update-task", {"taskId": "T1", "colour": "red"})

    def test_color_outside_enum_rejected(self):
        with pytest.raises(ToolValidationError, match="color must be one of"):
            validate_tool_input("update-task", {"taskId": "T1", "color": "teal"})

    @pytest.mark.parametrize("position", ["top", "bottom", 0, 12])
    def test_position_accepts_number_or_token(self, position):
        validate_tool_input("update-task", {"taskId": "T1", "position": position})

    @pytest.mark.parametrize("position", ["middle", -1, 1.5, True])
    def test_position_rejects_other_values(self, position):
        with pytest.raises(ToolValidationError, match="position"):
            validate_tool_input("update-task", {"taskId": "T1", "position": position})

    def test_boolean_is_not_a_number(self):
        with pytest.raises(ToolValidationError, match="pointsEstimate must be of type number"):
            validate_tool_input("update-task", {"taskId": "T1", "pointsEstimate": True})

    def test_wrong_type(self):
        with pytest.raises(ToolValidationError, match="finished must be of type boolean"):
            validate_tool_input("add-subtask", {"taskId": "T1", "name": "x", "finished": "yes"})

    def test_negative_index_rejected(self):
        with pytest.raises(ToolValidationError, match="index must be at least 0"):
            validate_tool_input("update-subtask-by-position", {"taskId": "T1", "index": -1})

    def test_whole_float_is_not_an_integer(self):
        with pytest.raises(ToolValidationError, match="index must be of type integer, got 1.0"):
            validate_tool_input("update-subtask-by-position", {"taskId": "T1", "index": 1.0})

    def test_position_error_lists_both_alternatives(self):
        with pytest.raises(ToolValidationError) as exc_info:
            validate_tool_input("update-task", {"taskId": "T1", "position": "middle"})

        message = str(exc_info.value)
        assert "position must be of type integer" in message
        assert "position must be one of: top, bottom" in message

    def test_every_problem_is_reported(self):
        with pytest.raises(ToolValidationError) as exc_info:
            validate_tool_input("create-task", {"columnId": 7, "colour": "red"})

        message = str(exc_info.value)
        assert "Missing required parameter(s): name" in message
        assert "Unknown parameter(s): colour" in message
        assert "columnId must be of type string" in message

    def test_null_clears_are_allowed_where_declared(self):
        validate_tool_input("update-subtask-by-position", {"taskId": "T1", "index": 0, "userId": None})

    def test_null_rejected_elsewhere(self):
        with pytest.raises(ToolValidationError):
            validate_tool_input("add-subtask", {"taskId": "T1", "name": "x", "userId": None})

    def test_nested_subtask_errors_have_paths(self):
        with pytest.raises(ToolValidationError) as exc_info:
            validate_tool_input(
                "add-subtasks",
                {"taskId": "T1", "subtasks": [{"name": "a"}, {"finished": True}, {"name": 3}]},
            )

        message = str(exc_info.value)
        assert "Missing required parameter(s) in subtasks[1]: name" in message
        assert "subtasks[2].name must be of type string" in message

    def test_custom_field_needs_a_value(self):
        with pytest.raises(ToolValidationError, match="textValue or numberValue"):
            validate_tool_input("update-custom-field", {"taskId": "T1", "customFieldId": "CF1"})

    def test_due_date_status_enum(self):
        with pytest.raises(ToolValidationError, match="status must be one of: active, done"):
            validate_tool_input(
                "set-task-due-date",
                {"taskId": "T1", "dueTimestamp": "2024-01-01T00:00:00Z", "targetColumnId": "C1", "status": "late"},
            )

    def test_unknown_tool(self):
        with pytest.raises(ToolValidationError, match="Unknown tool: delete-board"):
            validate_tool_input("delete-board", {})


class TestSparseUpdates:
    """Only explicitly supplied optional fields reach the client."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "updates",
        [
            {},
            {"name": "New"},
            {"color": "red", "position": "top"},
            {"description": "", "pointsEstimate": 0, "totalSecondsEstimate": 3600},
            {
                "name": "All",
                "columnId": "C2",
                "description": "d",
                "color": "blue",
                "position": 0,
                "responsibleUserId": "U1",
                "totalSecondsEstimate": 60,
                "pointsEstimate": 2.5,
            },
        ],
    )
    async def test_update_task_payload(self, executor, mock_client, updates):
        await executor.execute("update-task", {"taskId": "T1", **updates})

        mock_client.update_task.assert_awaited_once_with("T1", updates)

    @pytest.mark.asyncio
    async def test_update_subtask_payload(self, executor, mock_client):
        mock_client.get_task_details.return_value = _task(subtasks=[Subtask(name="a")])

        await executor.execute("update-subtask-by-position", {"taskId": "T1", "index": 0, "finished": True})

        mock_client.update_subtask_by_position.assert_awaited_once_with("T1", 0, {"finished": True})

    @pytest.mark.asyncio
    async def test_update_comment_payload(self, executor, mock_client):
        await executor.execute("update-comment", {"taskId": "T1", "commentId": "CM1", "text": "hi"})

        mock_client.update_comment.assert_awaited_once_with("T1", "CM1", {"text": "hi"})

    @pytest.mark.asyncio
    async def test_add_subtask_payload(self, executor, mock_client):
        mock_client.add_subtask.return_value = 0

        await executor.execute("add-subtask", {"taskId": "T1", "name": "a", "userId": "U1"})

        mock_client.add_subtask.assert_awaited_once_with("T1", {"name": "a", "userId": "U1"})


class TestToolResults:
    """Tests for success narratives."""

    @pytest.mark.asyncio
    async def test_get_board(self, executor, mock_client):
        mock_client.get_board.return_value = Board(
            id="B1", name="Work", columns=[Column("C1", "To-do"), Column("C2", "Done")]
        )

        result = await executor.execute("get-board", {})

        assert result == "Board: Work\n\nColumns:\n- To-do (ID: C1)\n- Done (ID: C2)"

    @pytest.mark.asyncio
    async def test_create_task(self, executor, mock_client):
        mock_client.create_task.return_value = "T9"

        result = await executor.execute("create-task", {"name": "x", "columnId": "C1"})

        mock_client.create_task.assert_awaited_once_with("x", "C1", description=None)
        assert "Task ID: T9" in result

    @pytest.mark.asyncio
    async def test_get_tasks_empty(self, executor, mock_client):
        mock_client.get_tasks_by_column.return_value = []

        assert await executor.execute("get-tasks", {"columnId": "C1"}) == "No tasks found in this column"

    @pytest.mark.asyncio
    async def test_get_task_details(self, executor, mock_client):
        mock_client.get_task_details.return_value = _task(
            description="Details",
            position=0,
            subtasks=[Subtask(name="a", finished=True), Subtask(name="b", user_id="U1")],
            labels=[Label("Bug"), Label("Urgent", pinned=True)],
        )

        result = await executor.execute("get-task-details", {"taskId": "T1", "includePosition": True})

        mock_client.get_task_details.assert_awaited_once_with("T1", include_position=True)
        assert "- Position: 0" in result
        assert "1. ✅ a" in result
        assert "2. ⬜ b (assigned to: U1)" in result
        assert "- Labels: Bug, Urgent" in result

    @pytest.mark.asyncio
    async def test_get_all_tasks_flags_truncation(self, executor, mock_client):
        mock_client.get_all_tasks.return_value = [
            ColumnTasks("C1", "Big", [_task(id=f"A{i}") for i in range(20)], tasks_limited=True),
            ColumnTasks("C2", "Small", [_task(id=f"B{i}") for i in range(5)], tasks_limited=False),
        ]

        result = await executor.execute("get-all-tasks", {})

        assert "📂 **Big** (20 tasks):" in result
        assert "📂 **Small** (5 tasks):" in result
        assert result.count("This column has more tasks (limited to 20)") == 1

    @pytest.mark.asyncio
    async def test_update_subtask_marks_touched_index(self, executor, mock_client):
        mock_client.get_task_details.return_value = _task(subtasks=[Subtask(name="a"), Subtask(name="b")])

        result = await executor.execute("update-subtask-by-position", {"taskId": "T1", "index": 1, "name": "b"})

        assert "Successfully updated subtask at position 1!" in result
        assert "2. ⬜ b ← UPDATED" in result
        assert "1. ⬜ a ← UPDATED" not in result

    @pytest.mark.asyncio
    async def test_add_label(self, executor, mock_client):
        mock_client.add_label.return_value = 1
        mock_client.get_task_details.return_value = _task(labels=[Label("Bug"), Label("Urgent", pinned=True)])

        result = await executor.execute("add-label", {"taskId": "T1", "name": "Urgent", "pinned": True})

        mock_client.add_label.assert_awaited_once_with("T1", {"name": "Urgent", "pinned": True})
        assert "- Inserted at position: 1" in result
        assert "1. 🏷️ Bug" in result
        assert "2. 📌 Urgent" in result

    @pytest.mark.asyncio
    async def test_set_due_date(self, executor, mock_client):
        await executor.execute(
            "set-task-due-date",
            {"taskId": "T1", "dueTimestamp": "2024-05-01T12:00:00Z", "targetColumnId": "C2"},
        )

        mock_client.set_task_due_date.assert_awaited_once_with(
            "T1", {"dueTimestamp": "2024-05-01T12:00:00Z", "targetColumnId": "C2"}
        )

    @pytest.mark.asyncio
    async def test_update_custom_field(self, executor, mock_client):
        result = await executor.execute(
            "update-custom-field", {"taskId": "T1", "customFieldId": "CF1", "numberValue": 0}
        )

        mock_client.update_custom_field.assert_awaited_once_with("T1", "CF1", {"number": 0})
        assert "- Number value: 0" in result

    @pytest.mark.asyncio
    async def test_add_comment_truncates_preview(self, executor, mock_client):
        mock_client.add_comment.return_value = "CM1"

        result = await executor.execute("add-comment", {"taskId": "T1", "text": "x" * 150})

        assert "- Comment ID: CM1" in result
        assert f"- Text: {'x' * 100}..." in result

    @pytest.mark.asyncio
    async def test_add_subtasks(self, executor, mock_client):
        mock_client.add_subtasks.return_value = AddSubtasksResult(
            added=[InsertedItem("a", 0), InsertedItem("b", 1)]
        )

        result = await executor.execute("add-subtasks", {"taskId": "T1", "subtasks": [{"name": "a"}, {"name": "b"}]})

        assert "Successfully added 2 subtasks!" in result
        assert '2. "b" (position: 1)' in result

    @pytest.mark.asyncio
    async def test_create_task_with_subtasks(self, executor, mock_client):
        mock_client.create_task_with_subtasks.return_value = CreateTaskWithSubtasksResult(
            task_id="T1", task_name="T", added=[InsertedItem("a", 0), InsertedItem("b", 1)]
        )

        result = await executor.execute(
            "create-task-with-subtasks",
            {"name": "T", "columnId": "C", "subtasks": [{"name": "a"}, {"name": "b"}], "position": "top"},
        )

        mock_client.create_task_with_subtasks.assert_awaited_once_with(
            "T",
            "C",
            [{"name": "a"}, {"name": "b"}],
            description=None,
            color=None,
            position="top",
        )
        assert "- Total subtasks: 2" in result
        mock_client.get_task_details.assert_awaited_once_with("T1")


class TestFailures:
    """Failures are returned as text, never raised."""

    @pytest.mark.asyncio
    async def test_add_label_remote_failure(self, executor, mock_client):
        mock_client.add_label.side_effect = KanbanFlowAPIError("Task not found", status_code=404)

        result = await executor.execute("add-label", {"taskId": "T1", "name": "Bug"})

        assert result.startswith("Failed to add label:")
        assert "Task not found" in result

    @pytest.mark.asyncio
    async def test_invalid_color_makes_no_remote_call(self, executor, mock_client):
        result = await executor.execute("update-task", {"taskId": "T1", "color": "teal"})

        assert result.startswith("Failed to update task: Invalid arguments:")
        assert mock_client.method_calls == []

    @pytest.mark.asyncio
    async def test_subtask_out_of_range(self, executor, mock_client):
        mock_client.update_subtask_by_position.side_effect = SubtaskIndexError("T1", 5, 2)

        result = await executor.execute("update-subtask-by-position", {"taskId": "T1", "index": 5})

        assert result.startswith("Failed to update subtask: Subtask index 5 is out of range")

    @pytest.mark.asyncio
    async def test_label_not_found(self, executor, mock_client):
        mock_client.update_label.side_effect = LabelNotFoundError("T1", "Foo", ["Bar"])

        result = await executor.execute("update-label", {"taskId": "T1", "labelName": "Foo", "pinned": True})

        assert result.startswith('Failed to update label: No label named "Foo"')

    @pytest.mark.asyncio
    async def test_partial_composite_failure_is_explained(self, executor, mock_client):
        mock_client.create_task_with_subtasks.side_effect = PartialWriteError(
            "T1", [InsertedItem("a", 0)], 2, KanbanFlowAPIError("Boom", status_code=500), task_created=True
        )

        result = await executor.execute(
            "create-task-with-subtasks", {"name": "T", "columnId": "C", "subtasks": [{"name": "a"}, {"name": "b"}]}
        )

        assert result.startswith("Failed to create task with subtasks: Task T1 was created")
        assert "remain on the board" in result

    @pytest.mark.asyncio
    async def test_partial_bulk_add_is_explained(self, executor, mock_client):
        mock_client.add_subtasks.side_effect = PartialWriteError(
            "T1", [InsertedItem("a", 0)], 3, KanbanFlowAPIError("Boom", status_code=500)
        )

        result = await executor.execute(
            "add-subtasks", {"taskId": "T1", "subtasks": [{"name": "a"}, {"name": "b"}, {"name": "c"}]}
        )

        assert result.startswith("Failed to add subtasks: 1 of 3 subtasks were added to task T1")
        assert "those subtasks remain on the task" in result
        assert "Boom" in result

    @pytest.mark.asyncio
    async def test_empty_subtask_response_keeps_partial_write_text(self):
        """A success response without insertIndex still reports the created task."""
        responses = iter(
            [
                httpx.Response(200, json={"taskId": "T1"}),
                httpx.Response(200, json={"insertIndex": 0}),
                httpx.Response(200),
            ]
        )
        transport = httpx.MockTransport(lambda request: next(responses))

        async with KanbanFlowClient(token="tok", base_url="http://test.local", transport=transport) as client:
            result = await ToolExecutor(client).execute(
                "create-task-with-subtasks",
                {"name": "T", "columnId": "C1", "subtasks": [{"name": "a"}, {"name": "b"}]},
            )

        assert result.startswith("Failed to create task with subtasks: Task T1 was created")
        assert "1 of 2 subtasks" in result
        assert "Response is missing insertIndex (code: INVALID_RESPONSE)" in result

    @pytest.mark.asyncio
    async def test_empty_create_response(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200))

        async with KanbanFlowClient(token="tok", base_url="http://test.local", transport=transport) as client:
            result = await ToolExecutor(client).execute("create-task", {"name": "T", "columnId": "C1"})

        assert result == "Failed to create task: Response is missing taskId (code: INVALID_RESPONSE)"

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, executor, mock_client):
        mock_client.get_board.side_effect = RuntimeError("kaboom")

        assert await executor.execute("get-board", {}) == "Failed to get board: kaboom"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, executor):
        assert await executor.execute("delete-board", {}) == "Failed to run delete-board: Unknown tool: delete-board"

    @pytest.mark.asyncio
    async def test_missing_arguments(self, executor):
        result = await executor.execute("get-tasks", None)

        assert result == "Failed to get tasks: Invalid arguments: Missing required parameter(s): columnId"
