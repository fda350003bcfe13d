"""Per-task time tracking driven by a global one-second sweep."""

import threading

from loguru import logger

from taskflow.models.board import Board, TaskPatch
from taskflow.services.board import BoardStore

START = TaskPatch(is_running=True)
PAUSE = TaskPatch(is_running=False)
FINISH = TaskPatch(is_running=False, is_finished=True)


def tick(board: Board) -> Board:
    """Add one second to every running, unfinished task."""
    new = board.model_copy(deep=True)
    for task in new.all_tasks():
        if task.is_running and not task.is_finished:
            task.time_spent += 1
    return new


def start_task(store: BoardStore, list_id: str, task_id: str) -> Board:
    return store.update_task(list_id, task_id, START)


def pause_task(store: BoardStore, list_id: str, task_id: str) -> Board:
    return store.update_task(list_id, task_id, PAUSE)


def finish_task(store: BoardStore, list_id: str, task_id: str) -> Board:
    return store.update_task(list_id, task_id, FINISH)


class TimerLoop:
    """Background clock that sweeps the store once per interval."""

    def __init__(self, store: BoardStore, interval: float = 1.0):
        self._store = store
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="taskflow-timer")
        self._thread.start()
        logger.info("Timer started ({}s period)", self._interval)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        thread = self._thread
        if thread and thread.is_alive():
            thread.join(timeout=timeout)
        self._thread = None
        logger.info("Timer stopped")

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self._store.tick(tick)
            except Exception:
                logger.exception("Timer tick failed")
