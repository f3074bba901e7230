# hcw_assistant/services/assistant/envelope.py
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

EnvelopeType = Literal["text", "table", "chart", "action"]

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


class SuggestedAction(BaseModel):
    label: str = Field(..., min_length=1)
    query: str = Field(..., min_length=1)


class ResponseEnvelope(BaseModel):
    """The only structured contract the assistant guarantees to its caller."""

    model_config = ConfigDict(populate_by_name=True)

    type: EnvelopeType = "text"
    content: str = Field(..., min_length=1)
    chart_spec: Optional[Dict[str, Any]] = Field(default=None, alias="chartSpec")
    actions: List[SuggestedAction] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)

    @field_validator("actions", "insights", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class EnvelopeParseResult:
    envelope: Optional[ResponseEnvelope] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.envelope is not None


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_envelope(raw: str) -> EnvelopeParseResult:
    """
    Strict parse of model output into a ResponseEnvelope.

    Missing fields take the forgiving defaults (type=text, content=raw text,
    actions/insights empty); anything that is not a JSON object or breaks
    the schema is reported as an error instead of raised.
    """
    cleaned = strip_code_fences(raw)

    try:
        data = json.loads(cleaned)
    except ValueError as e:
        return EnvelopeParseResult(error=f"invalid_json: {e}")

    if not isinstance(data, dict):
        return EnvelopeParseResult(error=f"not_an_object: {type(data).__name__}")

    content = data.get("content")
    if content is None or (isinstance(content, str) and not content.strip()):
        data["content"] = cleaned
    elif not isinstance(content, str):
        # tables sometimes arrive as structured rows; keep them as JSON text
        data["content"] = json.dumps(content, ensure_ascii=False)

    if not data.get("type"):
        data["type"] = "text"

    try:
        envelope = ResponseEnvelope.model_validate(data)
    except ValidationError as e:
        return EnvelopeParseResult(error=f"schema: {e.error_count()} errors: {e.errors()[0].get('msg')}")

    return EnvelopeParseResult(envelope=envelope)


# =========================================================
# Recovery envelopes
# =========================================================

def parse_failure_envelope(message: str, raw_text: str) -> ResponseEnvelope:
    return ResponseEnvelope(
        type="text",
        content=f'Based on your query about "{message}", here\'s what I found:\n\n{raw_text}',
        actions=[
            SuggestedAction(label="Show detailed breakdown", query=f"Show me a detailed breakdown of {message}"),
            SuggestedAction(label="Compare with different period", query=f"Compare {message} with different time periods"),
        ],
        insights=["Analysis completed successfully"],
    )


def unavailable_envelope() -> ResponseEnvelope:
    return ResponseEnvelope(
        type="text",
        content=(
            "I can help you analyze business data, sales performance, inventory levels, "
            "and customer insights. What specific metrics would you like to explore?"
        ),
        actions=[
            SuggestedAction(label="Sales Summary", query="Show me comprehensive sales summary"),
            SuggestedAction(label="Current Stock Status", query="What's our current inventory status?"),
            SuggestedAction(label="Product Performance", query="Show top performing products"),
            SuggestedAction(label="Weekly Comparison", query="Compare this week vs last week sales performance"),
        ],
        insights=["Ready to analyze your business data"],
    )


def error_envelope() -> ResponseEnvelope:
    return ResponseEnvelope(
        type="text",
        content=(
            "I apologize, but I encountered an error. "
            "Please try again or contact support if the issue persists."
        ),
    )
