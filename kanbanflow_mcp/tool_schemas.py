"""MCP tool schema definitions for the KanbanFlow API.

This module contains only the tool definitions (pure data) so the schemas
can be listed to the host and used for argument validation from one place.
"""

from .models import POSITION_TOKENS, TASK_COLORS

COLOR_SCHEMA = {
    "type": "string",
    "enum": list(TASK_COLORS),
}

POSITION_SCHEMA = {
    "oneOf": [
        {"type": "integer", "minimum": 0},
        {"type": "string", "enum": list(POSITION_TOKENS)},
    ],
}

SUBTASK_ITEM_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "description": "Name of the subtask",
        },
        "finished": {
            "type": "boolean",
            "description": "Whether the subtask is completed (default: false)",
        },
        "userId": {
            "type": "string",
            "description": "ID of the user to assign the subtask to",
        },
        "dueDateTimestamp": {
            "type": "string",
            "description": "UTC timestamp when the subtask is due",
        },
        "dueDateTimestampLocal": {
            "type": "string",
            "description": "Local timestamp when the subtask is due",
        },
    },
    "required": ["name"],
    "additionalProperties": False,
}

# Tool definitions for MCP
TOOLS = [
    {
        "name": "get-board",
        "description": "Get the Kanban board structure: the board name and its columns with their IDs. Use the column IDs with the other tools.",
        "input_schema": {
            "type": "object",
            "properties": {},
            "additionalProperties": False,
        },
    },
    {
        "name": "create-task",
        "description": "Create a new task on the board.",
        "input_schema": {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Name of the task",
                },
                "columnId": {
                    "type": "string",
                    "description": "ID of the column to create the task in",
                },
                "description": {
                    "type": "string",
                    "description": "Task description (optional)",
                },
            },
            "required": ["name", "columnId"],
            "additionalProperties": False,
        },
    },
    {
        "name": "get-tasks",
        "description": "Get all tasks in a column.",
        "input_schema": {
            "type": "object",
            "properties": {
                "columnId": {
                    "type": "string",
                    "description": "ID of the column to get tasks from",
                },
            },
            "required": ["columnId"],
            "additionalProperties": False,
        },
    },
    {
        "name": "get-task-details",
        "description": "Get detailed information about a specific task by its ID, including subtasks, labels, dates and relations.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task to get details for",
                },
                "includePosition": {
                    "type": "boolean",
                    "description": "Whether to include the task's position in its column",
                },
            },
            "required": ["taskId"],
            "additionalProperties": False,
        },
    },
    {
        "name": "update-task",
        "description": "Update properties of an existing task. Only the fields you pass are changed.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task to update",
                },
                "name": {
                    "type": "string",
                    "description": "New task name",
                },
                "columnId": {
                    "type": "string",
                    "description": "ID of the column to move the task to",
                },
                "description": {
                    "type": "string",
                    "description": "New task description",
                },
                "color": {
                    **COLOR_SCHEMA,
                    "description": "New task color",
                },
                "position": {
                    **POSITION_SCHEMA,
                    "description": "New position: a zero-based number, 'top' or 'bottom'",
                },
                "responsibleUserId": {
                    "type": "string",
                    "description": "ID of the user responsible for the task",
                },
                "totalSecondsEstimate": {
                    "type": "number",
                    "description": "Estimated time in seconds",
                },
                "pointsEstimate": {
                    "type": "number",
                    "description": "Points estimate for the task",
                },
            },
            "required": ["taskId"],
            "additionalProperties": False,
        },
    },
    {
        "name": "get-all-tasks",
        "description": "Get all tasks from all columns on the board, grouped by column. Each column returns at most 20 tasks.",
        "input_schema": {
            "type": "object",
            "properties": {},
            "additionalProperties": False,
        },
    },
    {
        "name": "add-subtask",
        "description": "Add a subtask to the end of an existing task's subtask list.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task to add a subtask to",
                },
                "name": {
                    "type": "string",
                    "description": "Name of the subtask",
                },
                "finished": {
                    "type": "boolean",
                    "description": "Whether the subtask is completed (default: false)",
                },
                "userId": {
                    "type": "string",
                    "description": "ID of the user to assign the subtask to",
                },
                "dueDateTimestamp": {
                    "type": "string",
                    "description": "UTC timestamp when the subtask is due (format: '2023-03-01T12:00:00Z')",
                },
                "dueDateTimestampLocal": {
                    "type": "string",
                    "description": "Local timestamp when the subtask is due",
                },
            },
            "required": ["taskId", "name"],
            "additionalProperties": False,
        },
    },
    {
        "name": "update-subtask-by-position",
        "description": "Update a subtask by its zero-based position in the task's subtask list. Subtasks have no IDs; positions shift when subtasks are added or removed, so read the task first. The task's subtask list is rewritten as a whole: concurrent edits made elsewhere between the read and the write are lost (last writer wins).",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task containing the subtask",
                },
                "index": {
                    "type": "integer",
                    "minimum": 0,
                    "description": "0-based position of the subtask to update",
                },
                "name": {
                    "type": "string",
                    "description": "New subtask name",
                },
                "finished": {
                    "type": "boolean",
                    "description": "Whether the subtask is completed",
                },
                "userId": {
                    "type": ["string", "null"],
                    "description": "ID of the user to assign the subtask to (null clears it)",
                },
                "dueDateTimestamp": {
                    "type": ["string", "null"],
                    "description": "UTC timestamp when the subtask is due (null clears it)",
                },
                "dueDateTimestampLocal": {
                    "type": ["string", "null"],
                    "description": "Local timestamp when the subtask is due (null clears it)",
                },
            },
            "required": ["taskId", "index"],
            "additionalProperties": False,
        },
    },
    {
        "name": "add-label",
        "description": "Add a label to an existing task.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task to add a label to",
                },
                "name": {
                    "type": "string",
                    "description": "Name of the label",
                },
                "pinned": {
                    "type": "boolean",
                    "description": "Whether the label should be pinned (default: false)",
                },
            },
            "required": ["taskId", "name"],
            "additionalProperties": False,
        },
    },
    {
        "name": "update-label",
        "description": "Update a label on a task, found by its current name (case-sensitive). If several labels share the name, the first one is updated. Last writer wins if the task is edited concurrently.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task containing the label",
                },
                "labelName": {
                    "type": "string",
                    "description": "Current name of the label (case-sensitive)",
                },
                "name": {
                    "type": "string",
                    "description": "New label name",
                },
                "pinned": {
                    "type": "boolean",
                    "description": "Whether the label should be pinned",
                },
            },
            "required": ["taskId", "labelName"],
            "additionalProperties": False,
        },
    },
    {
        "name": "set-task-due-date",
        "description": "Set or update a due date for a task.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task to set the due date for",
                },
                "dueTimestamp": {
                    "type": "string",
                    "description": "UTC timestamp when the task is due (format: '2023-03-01T12:00:00Z')",
                },
                "targetColumnId": {
                    "type": "string",
                    "description": "ID of the column the task should reach before it is due",
                },
                "dueTimestampLocal": {
                    "type": "string",
                    "description": "Local timestamp (defaults to dueTimestamp)",
                },
                "dateType": {
                    "type": "string",
                    "description": "Type of date (default: 'dueDate')",
                },
                "status": {
                    "type": "string",
                    "enum": ["active", "done"],
                    "description": "Status: 'active' or 'done' (default: 'active')",
                },
            },
            "required": ["taskId", "dueTimestamp", "targetColumnId"],
            "additionalProperties": False,
        },
    },
    {
        "name": "update-custom-field",
        "description": "Set or update a custom field value on a task. Pass textValue for text/dropdown fields or numberValue for number fields.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task to update",
                },
                "customFieldId": {
                    "type": "string",
                    "description": "ID of the custom field",
                },
                "textValue": {
                    "type": "string",
                    "description": "Text value for text/dropdown fields",
                },
                "numberValue": {
                    "type": "number",
                    "description": "Number value for number fields",
                },
            },
            "required": ["taskId", "customFieldId"],
            "additionalProperties": False,
        },
    },
    {
        "name": "add-comment",
        "description": "Add a comment to an existing task.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task to add a comment to",
                },
                "text": {
                    "type": "string",
                    "description": "The comment text",
                },
                "authorUserId": {
                    "type": "string",
                    "description": "ID of the comment author (defaults to the API user)",
                },
                "createdTimestamp": {
                    "type": "string",
                    "description": "UTC timestamp when the comment was created (defaults to now)",
                },
            },
            "required": ["taskId", "text"],
            "additionalProperties": False,
        },
    },
    {
        "name": "update-comment",
        "description": "Update an existing comment on a task.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task containing the comment",
                },
                "commentId": {
                    "type": "string",
                    "description": "ID of the comment to update",
                },
                "text": {
                    "type": "string",
                    "description": "New comment text",
                },
                "authorUserId": {
                    "type": "string",
                    "description": "Comment author ID",
                },
                "createdTimestamp": {
                    "type": "string",
                    "description": "UTC creation timestamp",
                },
                "updatedTimestamp": {
                    "type": "string",
                    "description": "UTC update timestamp (defaults to the current time)",
                },
            },
            "required": ["taskId", "commentId"],
            "additionalProperties": False,
        },
    },
    {
        "name": "add-subtasks",
        "description": "Add multiple subtasks to an existing task, in order. Subtasks are added one at a time; if one fails, the ones before it stay on the task.",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "ID of the task to add subtasks to",
                },
                "subtasks": {
                    "type": "array",
                    "items": SUBTASK_ITEM_SCHEMA,
                    "description": "Subtasks to add",
                },
            },
            "required": ["taskId", "subtasks"],
            "additionalProperties": False,
        },
    },
    {
        "name": "create-task-with-subtasks",
        "description": "Create a new task and add multiple subtasks to it. If adding a subtask fails, the task and the subtasks added before it remain on the board.",
        "input_schema": {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Name of the task",
                },
                "columnId": {
                    "type": "string",
                    "description": "ID of the column to create the task in",
                },
                "description": {
                    "type": "string",
                    "description": "Task description (optional)",
                },
                "color": {
                    **COLOR_SCHEMA,
                    "description": "Task color",
                },
                "position": {
                    **POSITION_SCHEMA,
                    "description": "Task position: a zero-based number, 'top' or 'bottom'",
                },
                "subtasks": {
                    "type": "array",
                    "items": SUBTASK_ITEM_SCHEMA,
                    "description": "Subtasks to add to the new task",
                },
            },
            "required": ["name", "columnId", "subtasks"],
            "additionalProperties": False,
        },
    },
]

TOOLS_BY_NAME = {tool["name"]: tool for tool in TOOLS}
