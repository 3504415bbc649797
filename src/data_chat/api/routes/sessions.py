"""Session management API routes.

Endpoints:
- GET /api/sessions/{session_id}/messages - Conversation history
- DELETE /api/sessions/{session_id} - Clear chat (history and cached answers)
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status

from data_chat.api.dependencies import QuestionServiceDep, SessionStoreDep
from data_chat.api.models import schemas
from data_chat.api.models.schemas import SESSION_ID_PATTERN

router = APIRouter()

SessionIdPath = Annotated[str, Path(..., max_length=64, pattern=SESSION_ID_PATTERN, description="Session ID")]


# ============================================================================
# GET /api/sessions/{session_id}/messages - Conversation History
# ============================================================================


@router.get("/sessions/{session_id}/messages", response_model=schemas.ConversationHistory)
def get_session_messages(session_id: SessionIdPath, store: SessionStoreDep) -> schemas.ConversationHistory:
    """Retrieve the conversation history of a session.

    Raises:
        HTTPException: 404 if session not found

    Example:
        GET /api/sessions/sess_a1b2c3d4e5f6a7b8/messages

        Response (200):
        {
            "session_id": "sess_a1b2c3d4e5f6a7b8",
            "messages": [{"message_id": "...", "role": "user", "content": "...", ...}],
            "created_at": "2026-01-03T15:30:00Z",
            "updated_at": "2026-01-03T15:35:00Z"
        }
    """
    state = store.get(session_id)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session '{session_id}' not found",
        )

    messages = [
        schemas.Message(
            message_id=msg.id,
            role=msg.role,
            content=msg.content,
            timestamp=msg.timestamp,
        )
        for msg in state.conversation.get_transcript()
    ]
    return schemas.ConversationHistory(
        session_id=state.session_id,
        messages=messages,
        created_at=state.created_at,
        updated_at=state.updated_at,
    )


# ============================================================================
# DELETE /api/sessions/{session_id} - Clear Chat
# ============================================================================


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: SessionIdPath, service: QuestionServiceDep) -> None:
    """Delete a session's history and cached answers.

    Raises:
        HTTPException: 404 if session not found
    """
    if not service.clear_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session '{session_id}' not found",
        )
