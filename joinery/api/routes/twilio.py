# joinery/api/routes/twilio.py
from fastapi import APIRouter, Depends, Form
from fastapi.responses import Response
from twilio.twiml.voice_response import VoiceResponse

from joinery.api.deps import get_assistant
from joinery.core.config import settings
from joinery.core.errors import ErrorSeverity, log_error
from joinery.core.logging import get_logger, set_call_context
from joinery.services.assistant import GREETING, VoiceAssistant
from joinery.utils.timeout_protection import with_timeout

router = APIRouter(prefix="/twilio", tags=["twilio"])
TWIML_CT = "application/xml"

logger = get_logger(__name__)

GOODBYE = "Thank you for calling. Goodbye!"
SLOW_TURN_REPLY = "Sorry, that took longer than expected. Could you please say that again?"
FATAL_REPLY = "Sorry, I encountered an error. Please try again later."


def _twiml(response: VoiceResponse) -> Response:
    return Response(content=str(response), media_type=TWIML_CT)


def _gather_next(response: VoiceResponse) -> None:
    """Listen for the caller's next command; falls through to goodbye on silence."""
    response.gather(
        input="speech",
        timeout=10,
        speech_timeout="auto",
        action="/twilio/voice",
        method="POST",
    )


@router.post("/voice")
async def voice_webhook(
    SpeechResult: str = Form(default=""),
    CallSid: str = Form(default=""),
    assistant: VoiceAssistant = Depends(get_assistant),
):
    """
    Single webhook for the whole call: no speech means a fresh call (greet),
    speech means a turn for the assistant.
    """
    set_call_context(session_id=CallSid or None)
    speech = SpeechResult.strip()

    try:
        response = VoiceResponse()
        if speech:
            logger.info("twilio_speech_received", speech=speech)
            reply = await with_timeout(
                assistant.process(speech, CallSid or None),
                timeout_seconds=settings.TURN_TIMEOUT_SECONDS,
                default_value=SLOW_TURN_REPLY,
            )
            response.say(reply)
        else:
            logger.info("twilio_call_started")
            response.say(GREETING)

        _gather_next(response)
        response.say(GOODBYE)
        response.hangup()
        return _twiml(response)

    except Exception as e:
        log_error(e, {"component": "twilio_webhook"}, ErrorSeverity.HIGH)
        response = VoiceResponse()
        response.say(FATAL_REPLY)
        response.hangup()
        return _twiml(response)
