"""JSON file persistence for the board, keyed under a single storage key."""

import json
import os
import tempfile
from pathlib import Path

from loguru import logger
from pydantic import ValidationError as SchemaError

from taskflow.models.board import Board


class BoardStorage:
    """Reads/writes the board document to a local JSON file under one key."""

    def __init__(self, path: Path, key: str = "taskflow-board"):
        self.path = path
        self.key = key

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}

    def load(self) -> Board | None:
        """Return the stored board, or None when absent or unreadable."""
        try:
            raw = self._read_all().get(self.key)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable board file {}: {}", self.path, e)
            return None
        if raw is None:
            return None
        try:
            return Board.model_validate(raw)
        except SchemaError as e:
            logger.warning("Ignoring malformed board state in {}: {}", self.path, e)
            return None

    def save(self, board: Board) -> None:
        try:
            everything = self._read_all()
        except (OSError, ValueError):
            everything = {}
        everything[self.key] = board.model_dump(mode="json", by_alias=True)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(everything, fh, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
