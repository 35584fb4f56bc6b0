"""Tool executor for MCP tools using the KanbanFlow API client."""

import logging
from typing import Any

from jsonschema import Draft202012Validator, ValidationError, validators

from . import formatters
from .client import KanbanFlowClient
from .formatters import truncate
from .tool_schemas import TOOLS_BY_NAME

logger = logging.getLogger(__name__)

# Used in "Failed to <verb>: <reason>" messages
TOOL_VERBS = {
    "get-board": "get board",
    "create-task": "create task",
    "get-tasks": "get tasks",
    "get-task-details": "get task details",
    "update-task": "update task",
    "get-all-tasks": "get all tasks",
    "add-subtask": "add subtask",
    "update-subtask-by-position": "update subtask",
    "add-label": "add label",
    "update-label": "update label",
    "set-task-due-date": "set due date",
    "update-custom-field": "update custom field",
    "add-comment": "add comment",
    "update-comment": "update comment",
    "add-subtasks": "add subtasks",
    "create-task-with-subtasks": "create task with subtasks",
}

TASK_UPDATE_FIELDS = (
    "name",
    "columnId",
    "description",
    "color",
    "position",
    "responsibleUserId",
    "totalSecondsEstimate",
    "pointsEstimate",
)
SUBTASK_FIELDS = ("finished", "userId", "dueDateTimestamp", "dueDateTimestampLocal")
SUBTASK_UPDATE_FIELDS = ("name", *SUBTASK_FIELDS)
LABEL_UPDATE_FIELDS = ("name", "pinned")
DATE_FIELDS = ("dueTimestampLocal", "dateType", "status")
COMMENT_FIELDS = ("authorUserId", "createdTimestamp")
COMMENT_UPDATE_FIELDS = ("text", "authorUserId", "createdTimestamp", "updatedTimestamp")


class ToolValidationError(ValueError):
    """Raised when tool arguments don't match the tool's input schema."""


def _is_integer(checker, instance) -> bool:
    # bool is a subclass of int, and 1.0 is a float
    return isinstance(instance, int) and not isinstance(instance, bool)


ToolInputValidator = validators.extend(
    Draft202012Validator,
    type_checker=Draft202012Validator.TYPE_CHECKER.redefine("integer", _is_integer),
)

_VALIDATORS = {name: ToolInputValidator(tool["input_schema"]) for name, tool in TOOLS_BY_NAME.items()}


def _format_path(path) -> str:
    """Render a jsonschema path as ``subtasks[1].name``."""
    text = ""
    for part in path:
        if isinstance(part, int):
            text += f"[{part}]"
        else:
            text += f".{part}" if text else part
    return text


def _describe(error: ValidationError) -> str:
    path = _format_path(error.absolute_path)
    match error.validator:
        case "required":
            missing = [param for param in error.validator_value if param not in error.instance]
            where = f" in {path}" if path else ""
            return f"Missing required parameter(s){where}: {', '.join(missing)}"
        case "additionalProperties":
            prefix = f"{path}." if path else ""
            properties = error.schema.get("properties", {})
            unknown = [prefix + key for key in error.instance if key not in properties]
            return f"Unknown parameter(s): {', '.join(unknown)}"
        case "type":
            types = error.validator_value
            types = [types] if isinstance(types, str) else types
            return f"{path} must be of type {' or '.join(types)}, got {error.instance!r}"
        case "enum":
            return f"{path} must be one of: {', '.join(map(str, error.validator_value))}, got {error.instance!r}"
        case "minimum":
            return f"{path} must be at least {error.validator_value}, got {error.instance!r}"
        case "oneOf" if error.context:
            return " or ".join(dict.fromkeys(_describe(e) for e in error.context))
    return f"{path}: {error.message}" if path else error.message


def validate_tool_input(tool_name: str, tool_input: dict[str, Any]) -> None:
    """Validate tool arguments against the tool's input schema.

    Raises:
        ToolValidationError: If the tool is unknown or the arguments are invalid
    """
    validator = _VALIDATORS.get(tool_name)
    if validator is None:
        raise ToolValidationError(f"Unknown tool: {tool_name}")

    # jsonschema reports a missing property once per property; keep one line per object
    errors = list(dict.fromkeys(_describe(e) for e in validator.iter_errors(tool_input)))
    if tool_name == "update-custom-field" and "textValue" not in tool_input and "numberValue" not in tool_input:
        errors.append("Provide textValue or numberValue")
    if errors:
        raise ToolValidationError(f"Invalid arguments: {'; '.join(errors)}")


def _pick(tool_input: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    """Return only the fields the caller actually supplied."""
    return {field: tool_input[field] for field in fields if field in tool_input}


class ToolExecutor:
    """Executes tool calls using the KanbanFlow API client.

    Every call returns text. Failures, including invalid arguments, come back
    as "Failed to <verb>: <reason>" rather than as exceptions.
    """

    def __init__(self, client: KanbanFlowClient):
        """Initialize with a configured API client."""
        self.client = client

    async def execute(self, tool_name: str, tool_input: dict[str, Any] | None) -> str:
        """
        Execute a tool call and return its result narrative.

        Args:
            tool_name: Name of the tool to execute
            tool_input: Input parameters for the tool

        Returns:
            Success narrative, or a "Failed to ..." message
        """
        tool_input = tool_input or {}
        verb = TOOL_VERBS.get(tool_name, f"run {tool_name}")
        try:
            validate_tool_input(tool_name, tool_input)
            return await self._run(tool_name, tool_input)
        except Exception as e:
            logger.warning(f"Tool {tool_name} failed: {e}")
            logger.debug(f"Tool {tool_name} input: {tool_input}", exc_info=True)
            return f"Failed to {verb}: {e}"

    async def _run(self, tool_name: str, tool_input: dict[str, Any]) -> str:  # noqa: C901
        match tool_name:
            case "get-board":
                return formatters.format_board(await self.client.get_board())

            case "create-task":
                task_id = await self.client.create_task(
                    tool_input["name"],
                    tool_input["columnId"],
                    description=tool_input.get("description"),
                )
                return f"Successfully created task!\nTask ID: {task_id}"

            case "get-tasks":
                return formatters.format_task_list(await self.client.get_tasks_by_column(tool_input["columnId"]))

            case "get-task-details":
                task = await self.client.get_task_details(
                    tool_input["taskId"],
                    include_position=tool_input.get("includePosition", False),
                )
                return formatters.format_task_details(task)

            case "update-task":
                await self.client.update_task(tool_input["taskId"], _pick(tool_input, TASK_UPDATE_FIELDS))
                task = await self.client.get_task_details(tool_input["taskId"])
                return formatters.format_updated_task(task)

            case "get-all-tasks":
                return formatters.format_all_tasks(await self.client.get_all_tasks())

            case "add-subtask":
                return await self._add_subtask(tool_input)

            case "update-subtask-by-position":
                return await self._update_subtask(tool_input)

            case "add-label":
                return await self._add_label(tool_input)

            case "update-label":
                return await self._update_label(tool_input)

            case "set-task-due-date":
                return await self._set_due_date(tool_input)

            case "update-custom-field":
                return await self._update_custom_field(tool_input)

            case "add-comment":
                return await self._add_comment(tool_input)

            case "update-comment":
                return await self._update_comment(tool_input)

            case "add-subtasks":
                return await self._add_subtasks(tool_input)

            case "create-task-with-subtasks":
                return await self._create_task_with_subtasks(tool_input)

            case _:
                raise ToolValidationError(f"Unknown tool: {tool_name}")

    async def _add_subtask(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        subtask = {"name": tool_input["name"], **_pick(tool_input, SUBTASK_FIELDS)}
        insert_index = await self.client.add_subtask(task_id, subtask)
        task = await self.client.get_task_details(task_id)

        lines = [
            "Successfully added subtask!",
            f"- Subtask name: {tool_input['name']}",
            f"- Inserted at position: {insert_index}",
            f"- Task: {task.name}",
        ]
        if task.subtasks:
            lines.extend(["", f"Current subtasks ({len(task.subtasks)}):"])
            lines.extend(formatters.format_subtasks(task.subtasks))
        return "\n".join(lines)

    async def _update_subtask(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        index = tool_input["index"]
        await self.client.update_subtask_by_position(task_id, index, _pick(tool_input, SUBTASK_UPDATE_FIELDS))
        task = await self.client.get_task_details(task_id)

        lines = [f"Successfully updated subtask at position {index}!", f"- Task: {task.name}"]
        if task.subtasks:
            lines.extend(["", f"Current subtasks ({len(task.subtasks)}):"])
            lines.extend(formatters.format_subtasks(task.subtasks, highlight=index))
        else:
            lines.extend(["", "No subtasks found in this task."])
        return "\n".join(lines)

    async def _add_label(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        label = {"name": tool_input["name"], **_pick(tool_input, ("pinned",))}
        insert_index = await self.client.add_label(task_id, label)
        task = await self.client.get_task_details(task_id)

        lines = [
            "Successfully added label!",
            f"- Label name: {tool_input['name']}",
            f"- Pinned: {str(tool_input.get('pinned', False)).lower()}",
            f"- Inserted at position: {insert_index}",
            f"- Task: {task.name}",
        ]
        if task.labels:
            lines.extend(["", f"Current labels ({len(task.labels)}):"])
            lines.extend(formatters.format_labels(task.labels))
        return "\n".join(lines)

    async def _update_label(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        await self.client.update_label(task_id, tool_input["labelName"], _pick(tool_input, LABEL_UPDATE_FIELDS))
        task = await self.client.get_task_details(task_id)

        lines = ["Successfully updated label!", f"- Original label: {tool_input['labelName']}"]
        if "name" in tool_input:
            lines.append(f"- New name: {tool_input['name']}")
        if "pinned" in tool_input:
            lines.append(f"- Pinned: {str(tool_input['pinned']).lower()}")
        lines.append(f"- Task: {task.name}")
        if task.labels:
            lines.extend(["", f"Current labels ({len(task.labels)}):"])
            lines.extend(formatters.format_labels(task.labels))
        return "\n".join(lines)

    async def _set_due_date(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        date = {
            "dueTimestamp": tool_input["dueTimestamp"],
            "targetColumnId": tool_input["targetColumnId"],
            **_pick(tool_input, DATE_FIELDS),
        }
        await self.client.set_task_due_date(task_id, date)
        task = await self.client.get_task_details(task_id)

        lines = [
            "Successfully set due date!",
            f"- Task: {task.name}",
            f"- Due: {tool_input['dueTimestamp']}",
            f"- Target column: {tool_input['targetColumnId']}",
            f"- Status: {tool_input.get('status', 'active')}",
        ]
        if task.dates:
            lines.extend(["", f"Current dates ({len(task.dates)}):"])
            lines.extend(formatters.format_dates(task.dates, detailed=False))
        return "\n".join(lines)

    async def _update_custom_field(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        value = {}
        if "textValue" in tool_input:
            value["text"] = tool_input["textValue"]
        if "numberValue" in tool_input:
            value["number"] = tool_input["numberValue"]
        await self.client.update_custom_field(task_id, tool_input["customFieldId"], value)
        task = await self.client.get_task_details(task_id)

        lines = [
            "Successfully updated custom field!",
            f"- Task: {task.name}",
            f"- Custom field ID: {tool_input['customFieldId']}",
        ]
        if "text" in value:
            lines.append(f"- Text value: {value['text']}")
        if "number" in value:
            lines.append(f"- Number value: {value['number']}")
        if task.custom_fields:
            lines.extend(["", f"Current custom fields ({len(task.custom_fields)}):"])
            lines.extend(formatters.format_custom_fields(task.custom_fields))
        return "\n".join(lines)

    async def _add_comment(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        comment = {"text": tool_input["text"], **_pick(tool_input, COMMENT_FIELDS)}
        comment_id = await self.client.add_comment(task_id, comment)
        task = await self.client.get_task_details(task_id)

        lines = [
            "Successfully added comment!",
            f"- Comment ID: {comment_id}",
            f"- Text: {truncate(tool_input['text'])}",
            f"- Task: {task.name}",
        ]
        if tool_input.get("authorUserId"):
            lines.append(f"- Author: {tool_input['authorUserId']}")
        return "\n".join(lines)

    async def _update_comment(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        comment_id = tool_input["commentId"]
        await self.client.update_comment(task_id, comment_id, _pick(tool_input, COMMENT_UPDATE_FIELDS))
        task = await self.client.get_task_details(task_id)

        lines = ["Successfully updated comment!", f"- Task: {task.name}", f"- Comment ID: {comment_id}"]
        if "text" in tool_input:
            lines.append(f"- New text: {truncate(tool_input['text'])}")
        if tool_input.get("authorUserId"):
            lines.append(f"- Author: {tool_input['authorUserId']}")
        return "\n".join(lines)

    async def _add_subtasks(self, tool_input: dict[str, Any]) -> str:
        task_id = tool_input["taskId"]
        result = await self.client.add_subtasks(task_id, tool_input["subtasks"])
        task = await self.client.get_task_details(task_id)

        lines = [
            f"Successfully added {result.total_added} subtasks!",
            f"- Task: {task.name}",
            f"- Total subtasks added: {result.total_added}",
            "",
        ]
        lines.extend(
            f'{number}. "{item.name}" (position: {item.insert_index})' for number, item in enumerate(result.added, 1)
        )
        if task.subtasks:
            lines.extend(["", f"All current subtasks ({len(task.subtasks)}):"])
            lines.extend(formatters.format_subtasks(task.subtasks, detailed=False))
        return "\n".join(lines)

    async def _create_task_with_subtasks(self, tool_input: dict[str, Any]) -> str:
        result = await self.client.create_task_with_subtasks(
            tool_input["name"],
            tool_input["columnId"],
            tool_input["subtasks"],
            description=tool_input.get("description"),
            color=tool_input.get("color"),
            position=tool_input.get("position"),
        )
        task = await self.client.get_task_details(result.task_id)

        lines = [
            f"Successfully created task with {result.total_subtasks} subtasks!",
            f"- Task ID: {result.task_id}",
            f"- Task Name: {result.task_name}",
            f"- Column ID: {tool_input['columnId']}",
        ]
        if tool_input.get("description"):
            lines.append(f"- Description: {tool_input['description']}")
        if tool_input.get("color"):
            lines.append(f"- Color: {tool_input['color']}")
        lines.extend([f"- Total subtasks: {result.total_subtasks}", "", "Added subtasks:"])
        lines.extend(
            f'{number}. "{item.name}" (position: {item.insert_index})' for number, item in enumerate(result.added, 1)
        )
        if task.subtasks:
            lines.extend(["", "Current subtasks status:"])
            lines.extend(formatters.format_subtasks(task.subtasks, detailed=False))
        return "\n".join(lines)
