from enum import Enum
from typing import Literal

from taskflow.models.board import CamelModel


class EnhancementType(str, Enum):
    GENERAL = "general"
    SPEC = "spec"
    BUG = "bug"
    PROMPT = "prompt"

    @classmethod
    def parse(cls, value: str | None) -> "EnhancementType":
        """Map a wire value to a kind; anything unknown is GENERAL."""
        try:
            return cls(value)
        except ValueError:
            return cls.GENERAL


class EnhanceRequest(CamelModel):
    # Optional: the route reports missing fields itself, as a 400
    task_text: str | None = None
    enhancement_type: str | None = None


class EnhanceResponse(CamelModel):
    enhanced_text: str


class TaskEnhanceRequest(CamelModel):
    enhancement_type: str = EnhancementType.GENERAL.value
    field: Literal["title", "details"] = "title"
