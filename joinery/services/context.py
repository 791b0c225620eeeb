# joinery/services/context.py
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def merge_context(
    session_context: Dict[str, Any],
    context_update: Optional[Mapping[str, Any]],
    turn_parameters: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Fold a turn's extracted entities into the session and build the
    parameters an action runs with.

    1. context_update is merged into session_context in place; keys are
       overwritten, never removed.
    2. The result is session_context with turn_parameters layered on top
       (the current turn wins).

    Blank values (None or empty strings) count as "not mentioned" on both
    sides, so a reply that echoes empty slots cannot wipe a remembered
    client or project. Key names are not validated.
    """
    if context_update:
        for key, value in context_update.items():
            if _is_blank(value):
                continue
            session_context[key] = value

    effective = dict(session_context)
    if turn_parameters:
        effective.update({k: v for k, v in turn_parameters.items() if not _is_blank(v)})
    return effective
