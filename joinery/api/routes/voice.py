# joinery/api/routes/voice.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status

from joinery.api.deps import get_assistant, get_session_store
from joinery.schemas.voice import SessionOut, VoiceTestRequest, VoiceTestResponse
from joinery.services.assistant import VoiceAssistant
from joinery.services.session_store import SessionStore

router = APIRouter(prefix="/voice", tags=["voice"])

TEST_SESSION_ID = "test-session"


@router.post("/test-ai", response_model=VoiceTestResponse)
async def test_ai_ep(payload: VoiceTestRequest, assistant: VoiceAssistant = Depends(get_assistant)):
    """Run one assistant turn over plain HTTP, same path as a phone call."""
    if not payload.speech or not payload.speech.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No speech provided")

    session_id = payload.session_id or TEST_SESSION_ID
    reply = await assistant.process(payload.speech, session_id)
    return VoiceTestResponse(
        speech=payload.speech,
        response=reply,
        session_id=session_id,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/sessions/{session_id}", response_model=SessionOut)
async def get_session_ep(session_id: str, store: SessionStore = Depends(get_session_store)):
    sess = await store.get(session_id)
    if sess is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return SessionOut(
        session_id=sess.session_id,
        context=sess.context,
        history=sess.history,
        last_activity=sess.last_activity,
    )


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_ep(session_id: str, store: SessionStore = Depends(get_session_store)):
    await store.delete(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
