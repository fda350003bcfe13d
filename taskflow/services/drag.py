"""Drag-and-drop reordering over the board.

A gesture is start(active_id), any number of over(over_id) updates, then
drop(over_id) or cancel(). Moving a task onto another list happens eagerly
on over(); final placement within a list happens on drop().
"""

import threading

from loguru import logger

from taskflow.models.board import Board
from taskflow.services.board import BoardStore


def array_move(items: list, old_index: int, new_index: int) -> list:
    """Remove the element at old_index and reinsert it at new_index."""
    moved = list(items)
    moved.insert(new_index, moved.pop(old_index))
    return moved


def transfer_task(board: Board, active_id: str, over_id: str) -> Board:
    """Move the dragged task to the end of the list under the pointer.

    No-op unless active_id is a task and over_id resolves to a different
    list (directly, or via a task inside it).
    """
    new = board.model_copy(deep=True)
    source = new.list_containing(active_id)
    target = new.resolve_list(over_id)
    if source is None or target is None or source.id == target.id:
        return new
    task = source.find_task(active_id)
    source.tasks = [t for t in source.tasks if t.id != active_id]
    target.tasks.append(task)
    return new


def reorder(board: Board, active_id: str, over_id: str) -> Board:
    """Settle a drop: reorder tasks within one list, or lists on the board."""
    new = board.model_copy(deep=True)
    if active_id == over_id:
        return new

    task_list = new.list_containing(active_id)
    if task_list is not None:
        old_index = task_list.index_of(active_id)
        new_index = task_list.index_of(over_id)
        if new_index != -1:
            task_list.tasks = array_move(task_list.tasks, old_index, new_index)
        return new

    old_index = new.list_index(active_id)
    new_index = new.list_index(over_id)
    if old_index != -1 and new_index != -1:
        new.lists = array_move(new.lists, old_index, new_index)
    return new


def _restore_task(board: Board, task_id: str, list_id: str, index: int) -> Board:
    new = board.model_copy(deep=True)
    current = new.list_containing(task_id)
    origin = new.find_list(list_id)
    if current is None or origin is None:
        return new
    task = current.find_task(task_id)
    current.tasks = [t for t in current.tasks if t.id != task_id]
    origin.tasks.insert(min(index, len(origin.tasks)), task)
    return new


class DragGesture:
    """Idle/dragging state machine for one drag interaction at a time.

    A cancelled gesture puts the dragged task back at the list and index it
    started from, wherever over() moved it in between.
    """

    def __init__(self, store: BoardStore):
        self._store = store
        self._lock = threading.Lock()
        self.active_id: str | None = None
        self._origin: tuple[str, int] | None = None

    @property
    def dragging(self) -> bool:
        return self.active_id is not None

    def start(self, active_id: str) -> Board:
        board = self._store.board
        with self._lock:
            self.active_id = active_id
            source = board.list_containing(active_id)
            self._origin = (source.id, source.index_of(active_id)) if source else None
        return board

    def over(self, over_id: str | None) -> Board:
        with self._lock:
            active_id = self.active_id
        if active_id is None or not over_id:
            return self._store.board
        return self._store.apply(transfer_task, active_id, over_id)

    def drop(self, over_id: str | None) -> Board:
        with self._lock:
            active_id = self.active_id
            self.active_id = None
            self._origin = None
        if active_id is None or not over_id:
            return self._store.board
        logger.debug("Drop {} on {}", active_id, over_id)
        return self._store.apply(reorder, active_id, over_id)

    def cancel(self) -> Board:
        with self._lock:
            active_id, origin = self.active_id, self._origin
            self.active_id = None
            self._origin = None
        if active_id is None or origin is None:
            return self._store.board
        list_id, index = origin
        return self._store.apply(_restore_task, active_id, list_id, index)
