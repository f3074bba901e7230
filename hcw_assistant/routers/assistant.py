# hcw_assistant/routers/assistant.py
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from hcw_assistant.schemas.assistant_models import (
    ChatRequest,
    ChatResponse,
    ErrorEnvelope,
    ErrorResponse,
    SessionHistoryResponse,
)
from hcw_assistant.services.assistant.envelope import error_envelope

logger = logging.getLogger("hcw.router.assistant")

router = APIRouter()

GENERIC_ERROR = "Sorry, I encountered an error processing your request. Please try again."


def error_payload() -> dict:
    return ErrorResponse(
        error=GENERIC_ERROR,
        response=ErrorEnvelope(content=error_envelope().content),
    ).model_dump()


# ===============================
# CHAT
# ===============================
@router.post("/chat", response_model=ChatResponse, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def chat(request: Request, req: ChatRequest):
    """
    Staff data assistant

    - context assembled from the business store
    - always answers with a typed envelope
    - exchange appended to the session log
    """
    service = request.state.assistant

    try:
        return await service.ask(
            message=req.message,
            session_id=req.session_id,
            staff_user_id=req.staff_user_id,
            previous_context=req.context,
        )
    except Exception:
        logger.exception("staff assistant failed session_id=%s", req.session_id)
        return JSONResponse(status_code=500, content=error_payload())


# ===============================
# SESSION HISTORY
# ===============================
@router.get("/sessions/{session_id}", response_model=SessionHistoryResponse, responses={500: {"model": ErrorResponse}})
async def session_history(request: Request, session_id: str):
    service = request.state.assistant

    try:
        return await service.session_history(session_id)
    except Exception:
        logger.exception("session history failed session_id=%s", session_id)
        return JSONResponse(status_code=500, content=error_payload())
