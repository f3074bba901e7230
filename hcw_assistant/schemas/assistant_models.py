from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    message: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1, alias="sessionId")
    staff_user_id: str = Field(..., min_length=1, alias="staffUserId")

    # previous turn's context object, forwarded to the model as-is
    context: Optional[Dict[str, Any]] = None


class EnvelopeOut(BaseModel):
    """
    Wire shape of a ResponseEnvelope (camelCase chartSpec).
    """
    model_config = ConfigDict(populate_by_name=True)

    type: str
    content: str
    chart_spec: Optional[Dict[str, Any]] = Field(default=None, alias="chartSpec")
    actions: List[Dict[str, str]] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: EnvelopeOut
    session_id: str = Field(..., alias="sessionId")
    timestamp: str


class ErrorEnvelope(BaseModel):
    type: str = "text"
    content: str


class ErrorResponse(BaseModel):
    error: str
    response: ErrorEnvelope


class SessionHistoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    exchanges: List[Dict[str, Any]] = Field(default_factory=list)
