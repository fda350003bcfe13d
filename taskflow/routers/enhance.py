from fastapi import APIRouter
from loguru import logger

from taskflow.exceptions import ValidationError
from taskflow.models.enhance import EnhanceRequest, EnhanceResponse
from taskflow.services import gemini as gemini_service

router = APIRouter(prefix="/api", tags=["enhance"])


@router.post("/enhance-task")
def enhance_task(req: EnhanceRequest) -> EnhanceResponse:
    logger.info("Enhancement request: type={} length={}", req.enhancement_type, len(req.task_text or ""))
    if not req.task_text or not req.enhancement_type:
        raise ValidationError("Missing taskText or enhancementType")
    enhanced = gemini_service.get_gateway().enhance(req.task_text, req.enhancement_type)
    return EnhanceResponse(enhanced_text=enhanced)
