"""Runs enhancements for board tasks and merges results back into the store."""

import threading

from loguru import logger

from taskflow.exceptions import NotFoundError, TaskBusyError, ValidationError
from taskflow.models.board import Board, TaskPatch
from taskflow.models.enhance import EnhancementType
from taskflow.services.board import BoardStore
from taskflow.services.gemini import EnhancementGateway
from taskflow.services.sanitize import sanitize

ENHANCEABLE_FIELDS = ("title", "details")


class TaskEnhancer:
    """Owns the set of task ids with an enhancement in flight.

    The store is not locked during the provider call: the task stays editable
    and if it is deleted meanwhile the result is dropped.
    """

    def __init__(self, store: BoardStore, gateway: EnhancementGateway):
        self._store = store
        self._gateway = gateway
        self._lock = threading.Lock()
        self._busy: set[str] = set()

    @property
    def busy_task_ids(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._busy)

    def is_busy(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._busy

    def _claim(self, task_id: str) -> None:
        with self._lock:
            if task_id in self._busy:
                raise TaskBusyError(f"Task {task_id} is already being enhanced")
            self._busy.add(task_id)

    def _release(self, task_id: str) -> None:
        with self._lock:
            self._busy.discard(task_id)

    def enhance(
        self,
        task_id: str,
        kind: EnhancementType | str = EnhancementType.GENERAL,
        field: str = "title",
    ) -> Board:
        """Enhance one text field of a task and return the updated board."""
        if field not in ENHANCEABLE_FIELDS:
            raise ValidationError(f"Cannot enhance field {field!r}")
        found = self._store.get_task(task_id)
        if found is None:
            raise NotFoundError(f"Task {task_id} not found")
        _, task = found
        original = getattr(task, field)
        if not original.strip():
            raise ValidationError(f"Task {field} is empty, nothing to enhance")

        self._claim(task_id)
        try:
            raw = self._gateway.enhance(original, kind)
        finally:
            self._release(task_id)

        enhanced = sanitize(raw, field)
        logger.debug("Enhanced {} of {}: {!r}", field, task_id, enhanced)
        patch = TaskPatch(**{field: enhanced, "original_text": original})
        return self._store.merge_task(task_id, patch)
