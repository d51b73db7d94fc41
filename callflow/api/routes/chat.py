"""
Chat API Endpoint.

Sends utterances (typed, or transcripts from a speech adapter) to the
scheduling engine and returns the reply with the updated state.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from callflow.core.scheduling.response import SUGGESTION_PRESETS, ResponseGenerator
from callflow.core.scheduling.sessions import get_session_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])


class ChatRequest(BaseModel):
    """Chat message request."""

    message: str = Field(
        ...,
        max_length=2000,
        description="User's utterance; blank input gets a re-prompt",
        examples=["Book a call with Jamie tomorrow at 9am about onboarding"],
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Existing session ID for conversation continuity",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )


class ChatResponse(BaseModel):
    """Chat response."""

    message: str = Field(
        ...,
        description="Agent's reply; segments are separated by newlines",
    )
    speech: str = Field(
        ...,
        description="Reply rendered as sentences for speech playback",
    )
    session_id: str = Field(
        ...,
        description="Session ID for continuing conversation",
    )
    state: str = Field(
        ...,
        description="Dialogue state after this turn (idle / awaiting_field)",
    )
    pending: Optional[dict] = Field(
        default=None,
        description="Draft booking still waiting for details",
    )
    appointments: list[dict] = Field(
        default_factory=list,
        description="All appointments in chronological order",
    )


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: Optional[str] = None


@router.post(
    "",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    summary="Send a chat message",
    description="Send an utterance to the scheduling assistant and get a reply.",
    responses={
        200: {"description": "Successful response"},
        422: {"model": ErrorResponse, "description": "Invalid request"},
    },
)
async def chat(request: ChatRequest) -> ChatResponse:
    """
    Process a chat message.

    The session_id should be preserved across requests so follow-up
    answers complete the pending booking.
    """
    manager = get_session_manager()
    session, outcome = manager.handle_message(
        message=request.message,
        session_id=request.session_id,
    )

    return ChatResponse(
        message=outcome.reply,
        speech=ResponseGenerator.to_speech(outcome.reply),
        session_id=session.session_id,
        state=session.state.value,
        pending=session.pending.to_dict() if session.pending else None,
        appointments=[appt.to_dict() for appt in session.appointments],
    )


@router.get(
    "/suggestions",
    response_model=list[str],
    summary="Example utterances",
)
async def suggestions() -> list[str]:
    """Preset utterances a client can offer as quick replies."""
    return list(SUGGESTION_PRESETS)


@router.get(
    "/session/{session_id}",
    response_model=dict,
    summary="Get session data",
    description="Retrieve the current state of a conversation session.",
    responses={
        200: {"description": "Session data"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def get_session(session_id: str) -> dict:
    """Get session information."""
    session = get_session_manager().get(session_id)

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )

    return session.to_dict()


@router.delete(
    "/session/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset a session",
    description="Drop the pending draft and transcript. Appointments are kept.",
)
async def reset_session(session_id: str) -> None:
    """Reset session to initial state."""
    session = get_session_manager().reset(session_id)

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
