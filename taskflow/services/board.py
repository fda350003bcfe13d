"""Board store: the single owner of the list/task tree.

Every operation takes the current Board and returns a new one. Unknown list
or task ids are silent no-ops.
"""

import threading
import uuid
from typing import Callable

from loguru import logger

from taskflow.models.board import (
    DEFAULT_BOARD_LIST_TITLE,
    NEW_LIST_TITLE,
    Board,
    ListPatch,
    Task,
    TaskList,
    TaskPatch,
)
from taskflow.storage import BoardStorage


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def _require_id(value: str, name: str) -> None:
    if not isinstance(value, str) or not value:
        raise TypeError(f"{name} must be a non-empty string, got {value!r}")


def default_board() -> Board:
    return Board(lists=[TaskList(id=_new_id("list"), title=DEFAULT_BOARD_LIST_TITLE)])


def format_time(seconds: int) -> str:
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def list_total_time(task_list: TaskList) -> int:
    return sum(task.time_spent for task in task_list.tasks)


# --- Lists ---


def add_list(board: Board, title: str = NEW_LIST_TITLE) -> Board:
    new = board.model_copy(deep=True)
    new.lists.append(TaskList(id=_new_id("list"), title=title))
    return new


def delete_list(board: Board, list_id: str) -> Board:
    _require_id(list_id, "list_id")
    new = board.model_copy(deep=True)
    new.lists = [lst for lst in new.lists if lst.id != list_id]
    return new


def update_list(board: Board, list_id: str, patch: ListPatch) -> Board:
    _require_id(list_id, "list_id")
    new = board.model_copy(deep=True)
    target = new.find_list(list_id)
    if target is None:
        return new
    for name, value in patch.model_dump(exclude_unset=True).items():
        setattr(target, name, value)
    return new


# --- Tasks ---


def add_task(
    board: Board, list_id: str, patch: TaskPatch | None = None,
) -> tuple[Board, str | None]:
    """Append a default task, optionally with initial fields. Returns the new
    board and the new task's id (None when the list does not exist)."""
    _require_id(list_id, "list_id")
    new = board.model_copy(deep=True)
    target = new.find_list(list_id)
    if target is None:
        return new, None
    task = Task(id=_new_id("task"))
    if patch is not None:
        apply_task_patch(task, patch)
    target.tasks.append(task)
    return new, task.id


def apply_task_patch(task: Task, patch: TaskPatch) -> None:
    """Apply a partial update to task in place, enforcing the timer rules.

    A finished task never runs again and its time is frozen. Finishing always
    stops the timer. Time never goes backwards. original_text is set once.
    """
    changes = patch.model_dump(exclude_unset=True)

    if task.is_finished:
        changes.pop("is_finished", None)
        changes.pop("time_spent", None)
    if task.is_finished or changes.get("is_finished"):
        changes["is_running"] = False

    if changes.get("time_spent", task.time_spent) < task.time_spent:
        changes.pop("time_spent")
    if task.original_text is not None:
        changes.pop("original_text", None)

    for name, value in changes.items():
        setattr(task, name, value)


def update_task(board: Board, list_id: str, task_id: str, patch: TaskPatch) -> Board:
    _require_id(list_id, "list_id")
    _require_id(task_id, "task_id")
    new = board.model_copy(deep=True)
    target = new.find_list(list_id)
    task = target.find_task(task_id) if target else None
    if task is not None:
        apply_task_patch(task, patch)
    return new


def delete_task(board: Board, list_id: str, task_id: str) -> Board:
    _require_id(list_id, "list_id")
    _require_id(task_id, "task_id")
    new = board.model_copy(deep=True)
    target = new.find_list(list_id)
    if target is not None:
        target.tasks = [t for t in target.tasks if t.id != task_id]
    return new


# --- Store ---


class BoardStore:
    """Thread-safe owner of the current Board.

    Mutations are applied one at a time behind a lock and persisted after
    each one. Readers always get a deep copy.
    """

    def __init__(self, storage: BoardStorage | None = None):
        self._lock = threading.RLock()
        self._storage = storage
        loaded = storage.load() if storage is not None else None
        if loaded is None:
            logger.info("No saved board found, starting with a default list")
            loaded = default_board()
        self._board = loaded

    @property
    def board(self) -> Board:
        with self._lock:
            return self._board.model_copy(deep=True)

    def _commit(self, board: Board) -> Board:
        if self._storage is not None:
            self._storage.save(board)
        self._board = board
        return board.model_copy(deep=True)

    def apply(self, operation: Callable[..., Board], *args) -> Board:
        """Run a board operation against the current board and commit it."""
        with self._lock:
            return self._commit(operation(self._board, *args))

    def add_list(self, title: str = NEW_LIST_TITLE) -> Board:
        return self.apply(add_list, title)

    def delete_list(self, list_id: str) -> Board:
        return self.apply(delete_list, list_id)

    def update_list(self, list_id: str, patch: ListPatch) -> Board:
        return self.apply(update_list, list_id, patch)

    def add_task(self, list_id: str, patch: TaskPatch | None = None) -> tuple[Board, str | None]:
        with self._lock:
            board, task_id = add_task(self._board, list_id, patch)
            return self._commit(board), task_id

    def update_task(self, list_id: str, task_id: str, patch: TaskPatch) -> Board:
        return self.apply(update_task, list_id, task_id, patch)

    def delete_task(self, list_id: str, task_id: str) -> Board:
        return self.apply(delete_task, list_id, task_id)

    def get_task(self, task_id: str) -> tuple[str, Task] | None:
        """Return (list_id, task copy) for task_id wherever it lives."""
        with self._lock:
            task_list = self._board.list_containing(task_id)
            if task_list is None:
                return None
            return task_list.id, task_list.find_task(task_id).model_copy()

    def merge_task(self, task_id: str, patch: TaskPatch) -> Board:
        """Patch a task found by id in whichever list now holds it.

        Used for results that complete asynchronously; if the task is gone by
        then, nothing happens.
        """
        with self._lock:
            task_list = self._board.list_containing(task_id)
            if task_list is None:
                logger.debug("Task {} no longer exists, dropping update", task_id)
                return self._board.model_copy(deep=True)
            return self._commit(update_task(self._board, task_list.id, task_id, patch))

    def tick(self, operation: Callable[[Board], Board]) -> Board:
        """Commit a timer sweep, skipping the write when nothing changed."""
        with self._lock:
            new = operation(self._board)
            if new == self._board:
                return new.model_copy(deep=True)
            return self._commit(new)
