# joinery/services/dispatcher.py
"""
Turns a recognised voice intent into database work and a spoken reply.

Every handler owns its failure mode: missing parameters produce a
follow-up question, empty lookups produce a not-found sentence, and store
errors are logged and turned into an apology. Nothing raises past dispatch().
"""
from __future__ import annotations

import secrets
from datetime import date, datetime
from functools import wraps
from typing import Any, Callable, Dict, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from joinery.core.errors import ErrorSeverity, ProjectNumberConflict, log_error
from joinery.core.logging import get_logger
from joinery.crud.material import update_materials_by_name
from joinery.crud.project import create_project, find_projects, get_project_by_number
from joinery.crud.task import create_task
from joinery.db.models.project import Project
from joinery.db.session import AsyncSessionLocal
from joinery.services.intents import Intent, VoiceAction

logger = get_logger(__name__)

Params = Mapping[str, Any]

DEFAULT_LIST_LIMIT = 5
MAX_LIST_LIMIT = 20
PROJECT_NUMBER_ATTEMPTS = 5

CLARIFY_REPLY = (
    "I understand you want help, but I need more specific information. "
    "What would you like me to do?"
)
ACTION_FAILED_REPLY = "Sorry, I had trouble completing that action. Please try again."


# ---------- Formatting helpers ----------

def _text(params: Params, key: str) -> Optional[str]:
    v = params.get(key)
    if v is None:
        return None
    v = str(v).strip()
    return v or None


def _speak_status(status: Optional[str]) -> str:
    return (status or "unknown").replace("_", " ")


def _money(amount: Any) -> str:
    value = float(amount or 0)
    return str(int(value)) if value.is_integer() else f"{value:.2f}"


def _parse_budget(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw)
    try:
        return float(str(raw).replace("$", "").replace(",", "").strip())
    except ValueError:
        return 0.0


def _parse_limit(raw: Any) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIST_LIMIT
    return max(1, min(limit, MAX_LIST_LIMIT))


def _is_ordered(order_status: Any) -> bool:
    if isinstance(order_status, bool):
        return order_status
    return str(order_status).strip().lower() in ("ordered", "true", "yes")


def generate_project_number(now: datetime) -> str:
    """<year>-<last three digits of the epoch milliseconds>, e.g. 2025-417."""
    millis = round(now.timestamp() * 1000)
    return f"{now.year}-{str(millis)[-3:]}"


def store_guard(failure_reply: str):
    """
    Decorator for dispatcher handlers: any store error is logged and
    replaced by failure_reply.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(self, params: Params) -> str:
            try:
                return await func(self, params)
            except Exception as e:
                log_error(e, {"component": "intent_dispatcher", "handler": func.__name__},
                          ErrorSeverity.HIGH)
                return failure_reply
        return wrapper
    return decorator


# ---------- Dispatcher ----------

class IntentDispatcher:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._session_factory = session_factory
        self._now = now

    async def dispatch(self, intent: Intent, params: Params) -> str:
        """Run the handler for intent.action with the merged parameters."""
        action = intent.action
        logger.info("intent_dispatch", action=action.value, param_keys=sorted(params))
        try:
            if action is VoiceAction.CREATE_PROJECT:
                return await self.create_project(params)
            elif action is VoiceAction.GET_PROJECT:
                return await self.get_project(params)
            elif action is VoiceAction.ADD_TASK:
                return await self.add_task(params)
            elif action is VoiceAction.UPDATE_MATERIAL:
                return await self.update_material(params)
            elif action is VoiceAction.GET_STATUS:
                return await self.get_status(params)
            elif action is VoiceAction.LIST_PROJECTS:
                return await self.list_projects(params)
            else:
                return intent.response or CLARIFY_REPLY
        except Exception as e:
            log_error(e, {"component": "intent_dispatcher", "action": action.value}, ErrorSeverity.HIGH)
            return ACTION_FAILED_REPLY

    # ----- lookups -----

    async def _resolve_project(self, db: AsyncSession, params: Params, keys: tuple[str, ...]) -> Optional[Project]:
        """
        Look up by the first identifier in keys that is present: project_number
        is exact, project_name and client are case-insensitive substrings.
        Newest match wins. A miss is a miss; lower-priority identifiers
        (often just remembered from earlier in the call) are not consulted.
        """
        for key in keys:
            value = _text(params, key)
            if value is None:
                continue
            rows = await find_projects(db, **{key: value}, limit=1)
            return rows[0] if rows else None
        return None

    async def _insert_project(self, db: AsyncSession, values: Dict[str, Any]) -> Project:
        base = generate_project_number(self._now())
        for attempt in range(PROJECT_NUMBER_ATTEMPTS):
            number = base if attempt == 0 else f"{base}-{secrets.token_hex(1).upper()}"
            if await get_project_by_number(db, number) is not None:
                continue
            try:
                return await create_project(db, {**values, "project_number": number})
            except IntegrityError:
                logger.warning("project_number_collision", project_number=number, attempt=attempt)
        raise ProjectNumberConflict(f"No free project number after {PROJECT_NUMBER_ATTEMPTS} attempts")

    # ----- handlers -----

    @store_guard("Sorry, I had trouble creating the project. Please try again.")
    async def create_project(self, params: Params) -> str:
        client = _text(params, "client")
        project_name = _text(params, "project_name")

        if not client:
            return "I need the client name to create a new project. Could you provide the client name?"
        if not project_name:
            return "I need the project name to create a new project. Could you provide the project name?"

        async with self._session_factory() as db:
            project = await self._insert_project(db, {
                "client": client,
                "project_name": project_name,
                "project_address": _text(params, "project_address") or "",
                "project_status": "planning",
                "overall_project_budget": _parse_budget(params.get("budget")),
                "priority_level": "medium",
                "date_created": date.today(),
            })

        logger.info("voice_project_created", project_number=project.project_number)
        return (
            f"Great! I've created a new project for {client} called \"{project_name}\" "
            f"with project number {project.project_number}. The project is now in planning status."
        )

    @store_guard("Sorry, I had trouble finding that project. Please try again.")
    async def get_project(self, params: Params) -> str:
        if not (_text(params, "project_number") or _text(params, "project_name")):
            return "I need either a project number or project name to look up the project."

        async with self._session_factory() as db:
            project = await self._resolve_project(db, params, ("project_number", "project_name"))

        if project is None:
            return "I couldn't find that project. Could you check the project number or name?"

        return (
            f"I found project {project.project_number} for {project.client}. "
            f"It's called \"{project.project_name}\" and is currently {_speak_status(project.project_status)}. "
            f"The budget is ${_money(project.overall_project_budget)} and it has a "
            f"{project.priority_level} priority."
        )

    @store_guard("Sorry, I had trouble adding that task. Please try again.")
    async def add_task(self, params: Params) -> str:
        task_description = _text(params, "task_description")
        if not task_description:
            return "I need the task description to add a task."

        async with self._session_factory() as db:
            project = await self._resolve_project(db, params, ("project_number", "project_name", "client"))
            if project is None:
                return (
                    "I need to know which project to add this task to. "
                    "Could you provide the project number, name, or client?"
                )
            project_name = project.project_name
            await create_task(db, project_id=project.id, task_description=task_description)

        return f"Perfect! I've added the task \"{task_description}\" to {project_name}."

    @store_guard("Sorry, I had trouble updating that material. Please try again.")
    async def update_material(self, params: Params) -> str:
        material_name = _text(params, "material_name")
        if not material_name:
            return "I need the material name to update its status."

        changes: Dict[str, Any] = {}
        order_status = params.get("order_status")
        if order_status is not None:
            changes["is_ordered"] = _is_ordered(order_status)
        order_number = _text(params, "order_number")
        if order_number:
            changes["order_number"] = order_number
        if not changes:
            return f"What would you like to update for {material_name}? You can give me an order status or an order number."

        async with self._session_factory() as db:
            project_id = None
            project_number = _text(params, "project_number")
            if project_number:
                project = await get_project_by_number(db, project_number)
                if project is not None:
                    project_id = project.id
            matched = await update_materials_by_name(db, material_name, changes, project_id=project_id)

        if matched == 0:
            return f"I couldn't find a material called {material_name}. Could you check the name?"

        if changes.get("is_ordered"):
            detail = "The material is now marked as ordered."
        else:
            detail = "The material order status has been updated."
        return f"I've updated the order status for {material_name}. {detail}"

    @store_guard("Sorry, I had trouble getting the project status. Please try again.")
    async def get_status(self, params: Params) -> str:
        keys = ("project_number", "project_name", "client")
        if not any(_text(params, k) for k in keys):
            return "I need the project number, name, or client to check the status."

        async with self._session_factory() as db:
            project = await self._resolve_project(db, params, keys)

        if project is None:
            return "I couldn't find that project. Please check the project number, name, or client."

        return (
            f"Project {project.project_number} is currently {_speak_status(project.project_status)}. "
            f"The client is {project.client} and the project is \"{project.project_name}\". "
            f"The budget is ${_money(project.overall_project_budget)} and it has a "
            f"{project.priority_level} priority."
        )

    @store_guard("Sorry, I had trouble getting the project list. Please try again.")
    async def list_projects(self, params: Params) -> str:
        status = _text(params, "status")
        if status:
            status = status.lower().replace(" ", "_")
        limit = _parse_limit(params.get("limit", DEFAULT_LIST_LIMIT))

        async with self._session_factory() as db:
            projects = await find_projects(db, status=status, limit=limit)

        if not projects:
            return "I don't see any projects in the system."

        entries = [
            f"{i}. Project {p.project_number} for {p.client} - \"{p.project_name}\" ({_speak_status(p.project_status)})"
            for i, p in enumerate(projects, start=1)
        ]
        return f"Here are your {len(projects)} most recent projects: " + ". ".join(entries)
