"""Conductor: conversations, intent routing and the agent request queue.

User messages are classified into an intent and turned into requests for
the first agent that declared that intent. Requests wait on a priority
queue that a single consumer drains, either on demand through
``process_requests`` or on a fixed tick through ``run``.
"""

import asyncio
import heapq
import itertools
import random
import string
import time
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, Field

from paam_studio.conductor.intents import Intent, classify
from paam_studio.config import get_settings
from paam_studio.errors import AgentNotFoundError, ConversationNotFoundError
from paam_studio.model.paam import Paam

DEFAULT_REPLY = (
    'I understand you\'re saying: "{content}". However, I\'m not sure how to help with that '
    "specifically. Could you please clarify what you'd like me to do?"
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return list(Priority).index(self)


class Message(BaseModel):
    id: str = Field(default_factory=lambda: _new_id("message"))
    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: datetime = Field(default_factory=_now)
    metadata: dict[str, Any] = {}


class Conversation(BaseModel):
    id: str
    messages: list[Message] = []
    current_paam: Paam | None = None
    active_agent: str | None = None
    session_data: dict[str, Any] = {}
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def touch(self) -> None:
        self.updated_at = _now()


class Capability(BaseModel):
    name: str
    description: str = ""
    intents: tuple[Intent, ...]
    input_types: list[str] = []
    output_types: list[str] = []


class AgentRequest(BaseModel):
    id: str = Field(default_factory=lambda: _new_id("request"))
    type: str = "message_processing"
    intent: Intent | None = None
    payload: dict[str, Any] = {}
    source_agent: str = "conductor"
    target_agent: str
    timestamp: datetime = Field(default_factory=_now)
    priority: Priority = Priority.MEDIUM


class AgentResponse(BaseModel):
    id: str = Field(default_factory=lambda: _new_id("response"))
    request_id: str
    success: bool
    data: Any = None
    error: str | None = None
    timestamp: datetime = Field(default_factory=_now)


class Conductor:
    """Routes conversation messages to registered agents."""

    def __init__(self):
        self.conversations: dict[str, Conversation] = {}
        self.agents: dict[str, Any] = {}
        self.capabilities: dict[str, list[Capability]] = {}
        self._handlers: dict[str, list[Callable[[dict], None]]] = defaultdict(list)
        self._queue: list[tuple[int, int, AgentRequest]] = []
        self._sequence = itertools.count()
        self._processing = False
        self._stopped = asyncio.Event()
        self._register_builtin_handlers()

    def _register_builtin_handlers(self) -> None:
        self.on("conversation_created", lambda d: logger.debug(f"Conversation created: {d['conversation_id']}"))
        self.on("message_received", lambda d: logger.debug(
            f"Message received in {d['conversation_id']}: {d['message'].content}"))
        self.on("agent_response", lambda r: logger.debug(
            f"Agent response for {r.request_id}: {'success' if r.success else 'failed'}"))
        self.on("error_occurred", lambda d: logger.error(f"Conductor error: {d['error']}"))

    # -- conversations ---------------------------------------------------------

    def create_conversation(self, conversation_id: str | None = None) -> Conversation:
        conversation = Conversation(id=conversation_id or _new_id("conversation"))
        self.conversations[conversation.id] = conversation
        self.emit("conversation_created", {"conversation_id": conversation.id, "conversation": conversation})
        return conversation

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        return self.conversations.get(conversation_id)

    def _require(self, conversation_id: str) -> Conversation:
        conversation = self.conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
        return conversation

    def add_message(self, conversation_id: str, role: str, content: str,
                    metadata: dict[str, Any] | None = None) -> Message:
        conversation = self._require(conversation_id)
        message = Message(role=role, content=content, metadata=metadata or {})
        conversation.messages.append(message)
        conversation.touch()
        self.emit("message_received", {"conversation_id": conversation_id, "message": message})
        if role == "user":
            self._route(conversation, message)
        return message

    def set_active_paam(self, conversation_id: str, paam: Paam) -> None:
        conversation = self._require(conversation_id)
        conversation.current_paam = paam
        conversation.touch()
        self.emit("paam_updated", {"conversation_id": conversation_id, "paam": paam})

    def get_active_paam(self, conversation_id: str) -> Paam | None:
        conversation = self.conversations.get(conversation_id)
        return conversation.current_paam if conversation else None

    def set_active_agent(self, conversation_id: str, agent_id: str) -> None:
        conversation = self._require(conversation_id)
        if agent_id not in self.agents:
            raise AgentNotFoundError(f"Agent {agent_id} not found")
        conversation.active_agent = agent_id
        conversation.touch()
        self.emit("agent_changed", {"conversation_id": conversation_id, "agent_id": agent_id})

    def get_conversation_history(self, conversation_id: str, limit: int | None = None) -> list[Message]:
        conversation = self.conversations.get(conversation_id)
        if conversation is None:
            return []
        return conversation.messages[-limit:] if limit else list(conversation.messages)

    def clear_conversation(self, conversation_id: str) -> None:
        conversation = self._require(conversation_id)
        conversation.messages = []
        conversation.touch()
        self.emit("conversation_cleared", {"conversation_id": conversation_id})

    # -- agents ----------------------------------------------------------------

    def register_agent(self, agent_id: str, agent: Any, capabilities: list[Capability] | None = None) -> None:
        self.agents[agent_id] = agent
        self.capabilities[agent_id] = list(capabilities if capabilities is not None else agent.get_capabilities())
        logger.info(f"Registered agent {agent_id}")
        self.emit("agent_registered", {"agent_id": agent_id, "capabilities": self.capabilities[agent_id]})

    def unregister_agent(self, agent_id: str) -> None:
        self.agents.pop(agent_id, None)
        self.capabilities.pop(agent_id, None)
        self.emit("agent_unregistered", {"agent_id": agent_id})

    def determine_target_agent(self, content: str, conversation: Conversation) -> tuple[str | None, Intent | None]:
        intent = classify(content)
        if intent is not None:
            for agent_id, capabilities in self.capabilities.items():
                if any(intent in capability.intents for capability in capabilities):
                    return agent_id, intent
        if conversation.active_agent and conversation.active_agent in self.agents:
            return conversation.active_agent, intent
        return None, intent

    def _route(self, conversation: Conversation, message: Message) -> None:
        agent_id, intent = self.determine_target_agent(message.content, conversation)
        if agent_id is None:
            self.add_message(
                conversation.id, "assistant", DEFAULT_REPLY.format(content=message.content),
                {"type": "default_response", "original_message_id": message.id},
            )
            return
        self.queue_request(AgentRequest(
            intent=intent,
            target_agent=agent_id,
            payload={
                "conversation_id": conversation.id,
                "message": message,
                "paam": conversation.current_paam,
            },
        ))

    # -- queue -----------------------------------------------------------------

    def queue_request(self, request: AgentRequest) -> None:
        heapq.heappush(self._queue, (request.priority.rank, next(self._sequence), request))

    def pending_requests(self) -> list[AgentRequest]:
        """Queued requests in the order they will be processed."""
        return [request for _, _, request in sorted(self._queue)]

    async def process_requests(self) -> int:
        """Drain the queue once; returns how many requests were processed.

        A call made while another pass is running returns 0 immediately.
        """
        if self._processing or not self._queue:
            return 0
        self._processing = True
        processed = 0
        try:
            while self._queue:
                _, _, request = heapq.heappop(self._queue)
                await self._process_request(request)
                processed += 1
        finally:
            self._processing = False
        return processed

    async def _process_request(self, request: AgentRequest) -> None:
        agent = self.agents.get(request.target_agent)
        if agent is None:
            self.emit("error_occurred", {"error": f"Agent {request.target_agent} not found", "request": request})
            return
        try:
            data = await agent.process_request(request)
            response = AgentResponse(request_id=request.id, success=True, data=data)
        except Exception as e:
            logger.exception(f"Agent {request.target_agent} failed on {request.id}")
            response = AgentResponse(request_id=request.id, success=False, error=str(e))
        self._handle_response(request, response)

    def _handle_response(self, request: AgentRequest, response: AgentResponse) -> None:
        self.emit("agent_response", response)
        if not response.success:
            self.emit("error_occurred", {"error": response.error, "request_id": response.request_id})
            return
        conversation_id = request.payload.get("conversation_id")
        if not isinstance(response.data, dict) or conversation_id not in self.conversations:
            return
        if isinstance(response.data.get("paam"), Paam):
            self.set_active_paam(conversation_id, response.data["paam"])
        if response.data.get("message"):
            self.add_message(
                conversation_id, "assistant", response.data["message"],
                {"agent": request.target_agent, "request_id": request.id},
            )

    async def run(self, interval: float | None = None) -> None:
        """Drain the queue every ``interval`` seconds until ``shutdown`` is called."""
        interval = interval if interval is not None else get_settings().conductor_tick_interval
        self._stopped.clear()
        logger.info(f"Conductor running, tick every {interval}s")
        while not self._stopped.is_set():
            await self.process_requests()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
        logger.info("Conductor stopped")

    def shutdown(self) -> None:
        self._stopped.set()
        self.conversations.clear()
        self.agents.clear()
        self.capabilities.clear()
        self._handlers.clear()
        self._register_builtin_handlers()
        self._queue.clear()
        self._processing = False
        logger.info("Conductor shutdown complete")

    # -- events ----------------------------------------------------------------

    def on(self, event: str, handler: Callable[[Any], None]) -> None:
        self._handlers[event].append(handler)

    def emit(self, event: str, data: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(data)
            except Exception:
                logger.exception(f"Error in event handler for {event}")

    def get_status(self) -> dict[str, Any]:
        return {
            "conversations": len(self.conversations),
            "agents": len(self.agents),
            "pending_requests": len(self._queue),
            "is_processing": self._processing,
        }
