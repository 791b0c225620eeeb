# joinery/services/llm.py
from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from joinery.core.config import settings
from joinery.core.errors import NLUProviderError
from joinery.core.logging import get_logger

logger = get_logger(__name__)

Message = Dict[str, str]


# ---------- Prompt ----------

SYSTEM_PROMPT = """You are a voice assistant for a custom joinery business project manager.

You can help with:
- Creating new projects
- Getting project information
- Adding tasks to projects
- Updating material order status
- Getting project status
- Listing projects

You have conversation memory and can refer to earlier parts of the call.
Current context: {context}

CONTEXT RULES:
- ALWAYS extract client names, project names and project numbers into updateContext
- "ABC Construction" -> updateContext {{"client": "ABC Construction"}}
- "Kitchen Renovation" -> updateContext {{"project_name": "Kitchen Renovation"}}
- "project 2024-001" -> updateContext {{"project_number": "2024-001"}}
- ALWAYS use the current context to fill missing parameters
- "add a task" or "what's the status" with a project in context means that project

Respond with ONLY a JSON object, no markdown:
{{
  "action": "create_project" | "get_project" | "add_task" | "update_material" | "get_status" | "list_projects" | "unknown",
  "parameters": {{ relevant data, filled from context where missing }},
  "response": "what to say back to the caller",
  "updateContext": {{ "client": ..., "project_name": ..., "project_number": ... }}
}}

Parameter names: client, project_name, project_number, project_address, budget,
task_description, material_name, order_status ("ordered" or "not_ordered"),
order_number, status, limit.

Be helpful and conversational. If you need clarification, ask for it."""


def build_messages(context: Mapping[str, Any], history: Sequence[Message]) -> List[Message]:
    """System instructions carrying the serialised context, then the bounded transcript."""
    system = SYSTEM_PROMPT.format(context=json.dumps(dict(context), default=str))
    return [{"role": "system", "content": system}] + [
        {"role": turn["role"], "content": turn["content"]} for turn in history
    ]


def _openai_base_url() -> str:
    """
    Allow overriding the base URL (useful for proxies/self-hosted gateways).
    """
    return (settings.OPENAI_BASE_URL or "https://api.openai.com").rstrip("/")


# ---------- Core call ----------

async def _post_chat(payload: Dict[str, Any], api_key: str, timeout: float) -> Dict[str, Any]:
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    async with httpx.AsyncClient(base_url=_openai_base_url(), timeout=timeout) as client:
        resp = await client.post("/v1/chat/completions", headers=headers, json=payload)
        resp.raise_for_status()
        return resp.json()


async def complete_chat(messages: List[Message], *, timeout: Optional[float] = None) -> str:
    """
    Send the conversation to the chat-completions endpoint and return the
    assistant's raw text.

    Raises NLUProviderError on missing credentials, HTTP/network failure,
    a malformed envelope, or when the call exceeds the timeout. An empty
    content string is returned as-is.
    """
    api_key = settings.OPENAI_API_KEY
    if not api_key:
        raise NLUProviderError("OPENAI_API_KEY is not set.")

    timeout = settings.NLU_TIMEOUT_SECONDS if timeout is None else timeout
    payload = {
        "model": settings.OPENAI_MODEL,
        "messages": messages,
        "temperature": settings.OPENAI_TEMPERATURE,
    }

    try:
        # httpx's own timeout is per-operation; wait_for bounds the whole exchange
        data = await asyncio.wait_for(_post_chat(payload, api_key, timeout), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise NLUProviderError(f"NLU provider timed out after {timeout}s") from e
    except httpx.HTTPStatusError as e:
        raise NLUProviderError(f"NLU provider returned HTTP {e.response.status_code}") from e
    except (httpx.HTTPError, ValueError) as e:
        raise NLUProviderError(f"NLU provider request failed: {e}") from e

    try:
        text = (data.get("choices") or [{}])[0].get("message", {}).get("content", "") or ""
    except (AttributeError, IndexError, TypeError) as e:
        raise NLUProviderError("NLU provider returned an unexpected payload") from e

    logger.debug("nlu_reply", model=settings.OPENAI_MODEL, raw=text)
    return text
