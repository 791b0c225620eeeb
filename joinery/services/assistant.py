# joinery/services/assistant.py
"""
Conversation orchestrator for the voice assistant.

One call to VoiceAssistant.process() is one turn: remember what the caller
said, ask the model what they want (with everything remembered so far),
run the matching database action, remember the reply, return it.
"""
from __future__ import annotations

from typing import Awaitable, Callable, List, Optional

from joinery.core.config import settings
from joinery.core.errors import ErrorSeverity, log_error
from joinery.core.logging import get_logger
from joinery.services.context import merge_context
from joinery.services.dispatcher import IntentDispatcher
from joinery.services.intents import parse_intent
from joinery.services.llm import Message, build_messages, complete_chat
from joinery.services.session_store import DEFAULT_SESSION_ID, SessionStore
from joinery.utils.timeout_protection import CallFlowTimer

logger = get_logger(__name__)

NLUProvider = Callable[[List[Message]], Awaitable[str]]

GREETING = (
    "Hello! I am your joinery project assistant. I can help you create projects, "
    "add tasks, check status, and manage materials. How can I help you today?"
)
NOT_HEARD_REPLY = "Sorry, I didn't catch that. Could you say it again?"
NOT_UNDERSTOOD_REPLY = "Sorry, I had trouble understanding that. Could you please repeat?"
ERROR_REPLY = "Sorry, I encountered an error processing your request. Please try again."


class VoiceAssistant:
    def __init__(
        self,
        store: SessionStore,
        dispatcher: Optional[IntentDispatcher] = None,
        nlu: NLUProvider = complete_chat,
        history_limit: int = settings.HISTORY_LIMIT,
    ):
        self.store = store
        self.dispatcher = dispatcher or IntentDispatcher()
        self.nlu = nlu
        self.history_limit = history_limit

    async def process(self, utterance: Optional[str], session_id: Optional[str] = None) -> str:
        """Handle one caller utterance and return the text to speak back."""
        session_id = session_id or DEFAULT_SESSION_ID
        speech = (utterance or "").strip()

        try:
            with CallFlowTimer("voice_turn", max_seconds=settings.NLU_TIMEOUT_SECONDS):
                async with self.store.lock(session_id):
                    return await self._turn(speech, session_id)
        except Exception as e:
            log_error(e, {"component": "voice_assistant", "session_id": session_id[:12]}, ErrorSeverity.HIGH)
            return ERROR_REPLY

    async def _turn(self, speech: str, session_id: str) -> str:
        session = await self.store.get_or_create(session_id)

        if not speech:
            # nothing to understand; greet on first contact without calling the model
            await self.store.save(session)
            return GREETING if not session.history else NOT_HEARD_REPLY

        logger.info("voice_turn_start", session_id=session_id[:12], speech=speech)
        session.add_turn("user", speech, self.history_limit)

        messages = build_messages(session.context, session.history)
        try:
            raw = await self.nlu(messages)
        except Exception as e:
            log_error(e, {"component": "nlu_provider", "session_id": session_id[:12]}, ErrorSeverity.MEDIUM)
            await self.store.save(session)
            return ERROR_REPLY

        if not raw or not raw.strip():
            await self.store.save(session)
            return NOT_UNDERSTOOD_REPLY

        intent = parse_intent(raw)
        if intent is None:
            # the model answered in prose; say it as-is and keep the conversation going
            logger.warning("nlu_reply_not_json", session_id=session_id[:12], raw=raw)
            reply = raw
        else:
            params = merge_context(session.context, intent.update_context, intent.parameters)
            logger.info(
                "voice_intent",
                action=intent.action.value,
                context_keys=sorted(session.context),
            )
            reply = await self.dispatcher.dispatch(intent, params)

        session.add_turn("assistant", reply, self.history_limit)
        await self.store.save(session)
        return reply
