# joinery/services/intents.py
from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


class VoiceAction(str, Enum):
    CREATE_PROJECT = "create_project"
    GET_PROJECT = "get_project"
    ADD_TASK = "add_task"
    UPDATE_MATERIAL = "update_material"
    GET_STATUS = "get_status"
    LIST_PROJECTS = "list_projects"
    UNKNOWN = "unknown"


class Intent(BaseModel):
    """One turn's structured reading of the caller, as returned by the model."""

    action: VoiceAction = VoiceAction.UNKNOWN
    parameters: Dict[str, Any] = Field(default_factory=dict)
    response: Optional[str] = Field(None, description="What the model suggests saying back")
    update_context: Optional[Dict[str, Any]] = Field(None, alias="updateContext")

    model_config = {"populate_by_name": True}

    @field_validator("action", mode="before")
    @classmethod
    def _coerce_action(cls, v: Any) -> VoiceAction:
        # the tag comes from an untrusted model; anything unexpected is "unknown"
        if isinstance(v, str):
            try:
                return VoiceAction(v.strip().lower())
            except ValueError:
                return VoiceAction.UNKNOWN
        return VoiceAction.UNKNOWN

    @field_validator("parameters", mode="before")
    @classmethod
    def _coerce_parameters(cls, v: Any) -> Dict[str, Any]:
        return v if isinstance(v, dict) else {}

    @field_validator("update_context", mode="before")
    @classmethod
    def _coerce_update(cls, v: Any) -> Optional[Dict[str, Any]]:
        return v if isinstance(v, dict) else None

    @field_validator("response", mode="before")
    @classmethod
    def _coerce_response(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return v if isinstance(v, str) else str(v)


_JSON_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def _strip_json_fences(s: str) -> str:
    """
    If the model wraps JSON in ```json ...```, strip the fence.
    """
    m = _JSON_FENCE_RE.match(s.strip())
    return m.group(1) if m else s.strip()


def parse_intent(text: str) -> Optional[Intent]:
    """
    Parse the model's reply into an Intent.
    Returns None when the reply is not a JSON object; the caller decides
    what to do with the raw text.
    """
    if not text:
        return None
    try:
        obj = json.loads(_strip_json_fences(text))
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(obj, dict):
        return None
    try:
        return Intent.model_validate(obj)
    except ValidationError:
        return None
