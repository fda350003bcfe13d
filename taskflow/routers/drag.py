from functools import lru_cache

from fastapi import APIRouter

from taskflow.models.board import Board
from taskflow.models.drag import DragOverRequest, DragStartRequest, DragState
from taskflow.routers.board import get_store
from taskflow.services.drag import DragGesture

router = APIRouter(prefix="/api/board/drag", tags=["drag"])


@lru_cache
def get_gesture() -> DragGesture:
    return DragGesture(get_store())


@router.post("/start")
def start(req: DragStartRequest) -> DragState:
    board = get_gesture().start(req.active_id)
    return DragState(active_id=req.active_id, board=board)


@router.post("/over")
def over(req: DragOverRequest) -> DragState:
    gesture = get_gesture()
    board = gesture.over(req.over_id)
    return DragState(active_id=gesture.active_id, board=board)


@router.post("/drop")
def drop(req: DragOverRequest) -> Board:
    return get_gesture().drop(req.over_id)


@router.post("/cancel")
def cancel() -> Board:
    return get_gesture().cancel()
