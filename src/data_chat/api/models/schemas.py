"""Pydantic models for API request/response schemas.

These models define the API contracts between frontend and backend.
All models use Pydantic v2 with strict validation.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Session ids are sess_<hex> tokens; restrict to a safe charset for file-backed stores
SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


# ============================================================================
# Question Schemas
# ============================================================================


class AskQuestionRequest(BaseModel):
    """Request to answer a natural language question."""

    model_config = ConfigDict(extra="forbid")

    question: str = Field(..., min_length=1, description="Natural language question")
    session_id: str | None = Field(
        None,
        max_length=64,
        pattern=SESSION_ID_PATTERN,
        description="Session ID for conversation history (new session when omitted)",
    )
    dataset_ids: list[str] | None = Field(
        None, description="Datasets to answer against (default: all configured datasets)"
    )


class AskQuestionResponse(BaseModel):
    """Answer to a question."""

    model_config = ConfigDict(extra="forbid")

    answer: str = Field(..., description="Generated answer text")
    session_id: str = Field(..., description="Session the answer was recorded in")
    cached: bool = Field(False, description="True if the answer came from the response cache")
    analyses: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Per-dataset intent and computed results used to ground the answer",
    )


class ErrorResponse(BaseModel):
    """Error body returned when a question cannot be processed."""

    error: str = Field(..., description="Error message")


# ============================================================================
# Dataset Schemas
# ============================================================================


class DatasetInfo(BaseModel):
    """Catalogue entry for one dataset."""

    model_config = ConfigDict(extra="forbid")

    dataset_id: str = Field(..., description="Dataset identifier")
    display_name: str = Field(..., description="Human-readable dataset name")
    period: str | None = Field(None, description="Reporting period label")
    loaded: bool = Field(False, description="True if the dataset has been loaded and profiled")
    row_count: int | None = Field(None, description="Row count (None until loaded)")


class DatasetListResponse(BaseModel):
    """Response containing the dataset catalogue."""

    model_config = ConfigDict(extra="forbid")

    datasets: list[DatasetInfo] = Field(..., description="Configured datasets")


class DatasetProfileResponse(BaseModel):
    """Profile of a loaded dataset."""

    model_config = ConfigDict(extra="forbid")

    dataset_id: str = Field(..., description="Dataset identifier")
    display_name: str = Field(..., description="Human-readable dataset name")
    period: str | None = Field(None, description="Reporting period label")
    profile: dict[str, Any] | None = Field(None, description="Dataset profile (None for an empty dataset)")


# ============================================================================
# Message/Conversation Schemas
# ============================================================================


class Message(BaseModel):
    """Single message in a conversation."""

    model_config = ConfigDict(extra="forbid")

    message_id: str = Field(..., description="Unique message identifier")
    role: Literal["user", "assistant"] = Field(..., description="Message sender role")
    content: str = Field(..., description="Message content")
    timestamp: datetime = Field(..., description="Message timestamp")


class ConversationHistory(BaseModel):
    """Full conversation history for a session."""

    model_config = ConfigDict(extra="forbid")

    session_id: str = Field(..., description="Session identifier")
    messages: list[Message] = Field(..., description="Ordered list of messages")
    created_at: datetime = Field(..., description="Session creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")
