# joinery/api/deps.py
from fastapi import Request

from joinery.services.assistant import VoiceAssistant
from joinery.services.session_store import SessionStore


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_assistant(request: Request) -> VoiceAssistant:
    return request.app.state.assistant
