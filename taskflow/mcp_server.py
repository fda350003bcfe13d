from fastmcp import FastMCP

from taskflow.exceptions import (
    EnhancementFailed,
    NotFoundError,
    RateLimitExceeded,
    TaskBusyError,
    ValidationError,
)
from taskflow.models.board import TaskPatch
from taskflow.routers.board import get_enhancer, get_store
from taskflow.services import timer as timer_service
from taskflow.services.board import format_time, list_total_time

mcp = FastMCP("Taskflow")

ENHANCE_ERRORS = (EnhancementFailed, NotFoundError, RateLimitExceeded, TaskBusyError, ValidationError)


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, RateLimitExceeded):
        return {"error": "rate_limit", "message": str(e), "action": "Wait and retry later"}
    if isinstance(e, TaskBusyError):
        return {"error": "busy", "message": str(e), "action": "Wait for the running enhancement to finish"}
    if isinstance(e, (NotFoundError, ValidationError)):
        return {"error": "invalid_request", "message": str(e)}
    return {"error": "enhancement_failed", "message": str(e)}


def _board_dict() -> dict:
    return get_store().board.model_dump(mode="json", by_alias=True)


# --- Board tools ---

@mcp.tool
def board_get() -> dict:
    """Get the whole board: lists in order, each with its tasks in order.
    Each list also carries its total tracked time as HH:MM:SS."""
    board = get_store().board
    data = board.model_dump(mode="json", by_alias=True)
    for list_data, task_list in zip(data["lists"], board.lists):
        list_data["totalTime"] = format_time(list_total_time(task_list))
    return data


@mcp.tool
def board_add_list(title: str | None = None) -> dict:
    """Append a new list to the board. Optionally give it a title."""
    if title:
        get_store().add_list(title)
    else:
        get_store().add_list()
    return _board_dict()


@mcp.tool
def board_delete_list(list_id: str) -> dict:
    """Delete a list and every task in it."""
    get_store().delete_list(list_id)
    return _board_dict()


@mcp.tool
def board_add_task(list_id: str, title: str = "", details: str = "") -> dict:
    """Add a task to the end of a list. Returns the new task id (null if the list does not exist)."""
    patch = TaskPatch(title=title, details=details) if title or details else None
    _, task_id = get_store().add_task(list_id, patch)
    return {"task_id": task_id, "board": _board_dict()}


@mcp.tool
def board_update_task(list_id: str, task_id: str, changes: dict) -> dict:
    """Update task fields (title, details, color, isRunning, isFinished, timeSpent).
    Only the keys provided are changed."""
    get_store().update_task(list_id, task_id, TaskPatch.model_validate(changes))
    return _board_dict()


@mcp.tool
def board_delete_task(list_id: str, task_id: str) -> dict:
    """Delete a task from a list."""
    get_store().delete_task(list_id, task_id)
    return _board_dict()


@mcp.tool
def timer_control(list_id: str, task_id: str, action: str) -> dict:
    """Control a task's timer. action is one of 'start', 'pause', 'finish'.
    Finished tasks cannot be restarted."""
    actions = {
        "start": timer_service.start_task,
        "pause": timer_service.pause_task,
        "finish": timer_service.finish_task,
    }
    if action not in actions:
        return {"error": "invalid_request", "message": f"Unknown timer action: {action}"}
    actions[action](get_store(), list_id, task_id)
    return _board_dict()


@mcp.tool
def task_enhance(task_id: str, enhancement_type: str = "general", field: str = "title") -> dict:
    """Rewrite a task's title or details with Gemini.
    enhancement_type is one of 'general', 'spec', 'bug', 'prompt'."""
    try:
        board = get_enhancer().enhance(task_id, enhancement_type, field)
        return board.model_dump(mode="json", by_alias=True)
    except ENHANCE_ERRORS as e:
        return _handle_mcp_error(e)
