# joinery/utils/timeout_protection.py
"""
Timeout helpers for the call flow. Twilio hangs up on slow webhooks, so
every turn must come back with something to say.
"""
import asyncio
import time
from typing import Any

from joinery.core.logging import get_logger

logger = get_logger(__name__)

async def with_timeout(coro, timeout_seconds: float = 3.0, default_value: Any = None):
    """
    Execute a coroutine with a timeout, returning default_value if it times out
    or fails.

    Args:
        coro: The coroutine to execute
        timeout_seconds: Maximum time to wait
        default_value: Value to return on timeout or error

    Returns:
        Result of coroutine or default_value
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning("operation_timed_out", timeout_seconds=timeout_seconds)
        return default_value
    except Exception as e:
        logger.error("operation_failed", error=str(e), error_type=type(e).__name__)
        return default_value

class CallFlowTimer:
    """
    Context manager that logs how long a call-flow step took and flags slow ones.

    Usage:
        with CallFlowTimer("voice_turn", max_seconds=5.0) as timer:
            reply = await assistant.process(speech, call_sid)
    """

    def __init__(self, operation_name: str, max_seconds: float = 3.0):
        self.operation_name = operation_name
        self.max_seconds = max_seconds
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = self.elapsed()
        if duration > self.max_seconds:
            logger.warning("call_flow_slow", operation=self.operation_name,
                           duration=round(duration, 3), limit=self.max_seconds)
        else:
            logger.debug("call_flow_timing", operation=self.operation_name, duration=round(duration, 3))

    def elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.perf_counter() - self.start_time
