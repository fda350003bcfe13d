from functools import lru_cache

from fastapi import APIRouter

from taskflow.config import get_settings
from taskflow.models.board import Board, CreatedTask, ListPatch, TaskPatch
from taskflow.models.enhance import TaskEnhanceRequest
from taskflow.services import gemini as gemini_service
from taskflow.services import timer as timer_service
from taskflow.services.board import BoardStore
from taskflow.services.enhancer import TaskEnhancer
from taskflow.storage import BoardStorage

router = APIRouter(prefix="/api/board", tags=["board"])


@lru_cache
def get_store() -> BoardStore:
    settings = get_settings()
    return BoardStore(BoardStorage(settings.board_file, settings.storage_key))


@lru_cache
def get_enhancer() -> TaskEnhancer:
    return TaskEnhancer(get_store(), gemini_service.get_gateway())


@router.get("")
def get_board() -> Board:
    return get_store().board


# --- Lists ---


@router.post("/lists")
def add_list() -> Board:
    return get_store().add_list()


@router.patch("/lists/{list_id}")
def update_list(list_id: str, patch: ListPatch) -> Board:
    return get_store().update_list(list_id, patch)


@router.delete("/lists/{list_id}")
def delete_list(list_id: str) -> Board:
    return get_store().delete_list(list_id)


# --- Tasks ---


@router.post("/lists/{list_id}/tasks")
def add_task(list_id: str) -> CreatedTask:
    board, task_id = get_store().add_task(list_id)
    return CreatedTask(task_id=task_id, board=board)


@router.patch("/lists/{list_id}/tasks/{task_id}")
def update_task(list_id: str, task_id: str, patch: TaskPatch) -> Board:
    return get_store().update_task(list_id, task_id, patch)


@router.delete("/lists/{list_id}/tasks/{task_id}")
def delete_task(list_id: str, task_id: str) -> Board:
    return get_store().delete_task(list_id, task_id)


@router.post("/lists/{list_id}/tasks/{task_id}/start")
def start_task(list_id: str, task_id: str) -> Board:
    return timer_service.start_task(get_store(), list_id, task_id)


@router.post("/lists/{list_id}/tasks/{task_id}/pause")
def pause_task(list_id: str, task_id: str) -> Board:
    return timer_service.pause_task(get_store(), list_id, task_id)


@router.post("/lists/{list_id}/tasks/{task_id}/finish")
def finish_task(list_id: str, task_id: str) -> Board:
    return timer_service.finish_task(get_store(), list_id, task_id)


# --- Enhancement ---


@router.post("/tasks/{task_id}/enhance")
def enhance_task(task_id: str, req: TaskEnhanceRequest) -> Board:
    return get_enhancer().enhance(task_id, req.enhancement_type, req.field)


@router.get("/enhancing")
def enhancing_tasks() -> list[str]:
    return sorted(get_enhancer().busy_task_ids)
