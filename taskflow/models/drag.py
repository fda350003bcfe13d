from taskflow.models.board import Board, CamelModel


class DragStartRequest(CamelModel):
    active_id: str


class DragOverRequest(CamelModel):
    over_id: str | None = None


class DragState(CamelModel):
    active_id: str | None
    board: Board
