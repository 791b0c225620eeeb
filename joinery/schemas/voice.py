# joinery/schemas/voice.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class VoiceTestRequest(BaseModel):
    """
    Incoming payload for /voice/test-ai.
    Same text contract as the Twilio webhook, without the telephony layer.
    """
    speech: Optional[str] = Field(None, description="Utterance as plain text")
    session_id: Optional[str] = Field(None, description="Conversation key; defaults to 'test-session'")


class VoiceTestResponse(BaseModel):
    speech: str
    response: str = Field(..., description="Reply that would be spoken to the caller")
    session_id: str
    timestamp: datetime


class SessionTurnOut(BaseModel):
    role: str
    content: str


class SessionOut(BaseModel):
    """Debug view of one call session's memory."""
    session_id: str
    context: Dict[str, Any]
    history: List[SessionTurnOut]
    last_activity: float
