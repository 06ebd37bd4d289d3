"""Shop assistant backed by the Gemini ``generateContent`` REST endpoint.

:class:`AssistantClient` is a stateless request/response wrapper with no
retries. :class:`ChatSession` keeps one conversation's transcript and
refuses a second message while the first is still waiting on the model.
"""
from __future__ import annotations

import base64
import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional
from urllib import error, request
from urllib.parse import quote, urlparse

from textile_pos.config import Settings, get_settings
from textile_pos.core.constants import CHAT_ERROR_TEXT, IMAGE_ERROR_TEXT
from textile_pos.core.errors import AssistantBusyError, AssistantError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are BusyBot, an expert AI assistant for a textile shop called 'Busy Textile'. "
    "You help shop owners with inventory advice, fabric knowledge, sales trends analysis, "
    "and general business questions. Be concise, professional, and helpful."
)
IMAGE_PROMPT = (
    "Analyze this image for a textile shop inventory system. Identify the material "
    "(e.g., Cotton, Silk), the likely pattern (e.g., Floral, Plain), color, and suggest "
    "a product name and short description. Format the output clearly."
)
GREETING_TEXT = "Hello! I am BusyBot. How can I assist you with your textile shop today?"
EMPTY_CHAT_TEXT = "I couldn't generate a response."
EMPTY_IMAGE_TEXT = "Could not analyze the image."


@dataclass(frozen=True)
class ChatTurn:
    role: str
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_error: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


def _extract_text(payload) -> str:
    parts = []
    for candidate in payload.get("candidates") or []:
        content = candidate.get("content") or {}
        for part in content.get("parts") or []:
            text = part.get("text")
            if text:
                parts.append(text)
        if parts:
            break
    return "".join(parts).strip()


class AssistantClient:
    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.api_key = (settings.GEMINI_API_KEY or "").strip()
        self.api_url = settings.GEMINI_API_URL.rstrip("/")
        self.model = settings.ASSISTANT_MODEL
        self.timeout = settings.ASSISTANT_TIMEOUT_SECONDS
        self.history_turns = settings.ASSISTANT_HISTORY_TURNS

    @property
    def endpoint(self) -> str:
        return "{}/models/{}:generateContent".format(self.api_url, quote(self.model, safe="-._"))

    def build_chat_payload(self, message: str, history=()) -> dict:
        recent = []
        if self.history_turns > 0:
            recent = [turn for turn in history if not turn.is_error][-self.history_turns:]
        contents = [{"role": turn.role, "parts": [{"text": turn.text}]} for turn in recent]
        contents.append({"role": "user", "parts": [{"text": message}]})
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": contents,
        }

    def build_image_payload(self, image_bytes: bytes, mime_type: str) -> dict:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": IMAGE_PROMPT},
                        {
                            "inlineData": {
                                "mimeType": mime_type,
                                "data": base64.b64encode(image_bytes).decode("ascii"),
                            }
                        },
                    ],
                }
            ]
        }

    def _post(self, payload: dict) -> dict:
        if not self.api_key:
            raise AssistantError("GEMINI_API_KEY is not configured")
        parsed = urlparse(self.api_url)
        if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
            raise AssistantError("GEMINI_API_URL must be an absolute HTTP(S) URL")

        req = request.Request(
            self.endpoint,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.api_key,
            },
        )
        try:
            with request.urlopen(req, timeout=self.timeout) as response:  # nosec B310
                body = response.read()
        except error.HTTPError as exc:
            raise AssistantError("Assistant API error: HTTP {}".format(exc.code)) from exc
        except (error.URLError, OSError) as exc:
            raise AssistantError("Assistant API unreachable: {}".format(exc)) from exc
        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as exc:
            raise AssistantError("Assistant API returned invalid JSON") from exc

    def chat(self, message: str, history=()) -> str:
        try:
            payload = self._post(self.build_chat_payload(message, history))
        except AssistantError:
            logger.exception("Assistant chat request failed")
            raise
        return _extract_text(payload) or EMPTY_CHAT_TEXT

    def analyze_image(self, image_bytes: bytes, mime_type: str) -> str:
        if not image_bytes:
            raise AssistantError("image is empty")
        try:
            payload = self._post(self.build_image_payload(image_bytes, mime_type))
        except AssistantError:
            logger.exception("Assistant image analysis failed")
            raise
        return _extract_text(payload) or EMPTY_IMAGE_TEXT


def analyze_image_for_display(client: AssistantClient, image_bytes: bytes, mime_type: str) -> dict:
    try:
        return {"result": client.analyze_image(image_bytes, mime_type), "is_error": False}
    except AssistantError:
        return {"result": IMAGE_ERROR_TEXT, "is_error": True}


class ChatSession:
    def __init__(self, session_id: str | None = None):
        self.id = session_id or uuid.uuid4().hex
        self.turns: list[ChatTurn] = [ChatTurn(role="model", text=GREETING_TEXT)]
        self._busy = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def send(self, client: AssistantClient, message: str) -> ChatTurn:
        """Send ``message`` and return the reply turn.

        A failed call is recorded as an error turn carrying the standard
        apology text. Raises ``AssistantBusyError`` if a send is pending.
        """
        message = (message or "").strip()
        if not message:
            raise ValueError("message is required")
        if not self._busy.acquire(blocking=False):
            raise AssistantBusyError()
        try:
            history = list(self.turns)
            self.turns.append(ChatTurn(role="user", text=message))
            try:
                reply = ChatTurn(role="model", text=client.chat(message, history))
            except AssistantError:
                reply = ChatTurn(role="model", text=CHAT_ERROR_TEXT, is_error=True)
            self.turns.append(reply)
            return reply
        finally:
            self._busy.release()


class ChatSessionRegistry:
    """Open chat transcripts, keyed by session id.

    Sessions idle for longer than ``idle_seconds`` are forgotten the next time
    a session is looked up; a session waiting on the model is kept.
    """

    def __init__(self, idle_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.idle_seconds = idle_seconds
        self.clock = clock
        self._sessions: dict[str, ChatSession] = {}
        self._last_seen: dict[str, float] = {}
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str | None = None) -> ChatSession:
        with self._lock:
            self._forget_idle()
            session = self._sessions.get(session_id) if session_id else None
            if session is None:
                session = ChatSession(session_id)
                self._sessions[session.id] = session
            self._last_seen[session.id] = self.clock()
            return session

    def _forget_idle(self) -> None:
        if not self.idle_seconds:
            return
        cutoff = self.clock() - self.idle_seconds
        stale = [
            session_id
            for session_id, seen in self._last_seen.items()
            if seen < cutoff and not self._sessions[session_id].busy
        ]
        for session_id in stale:
            del self._sessions[session_id]
            del self._last_seen[session_id]
        if stale:
            logger.info("Forgot %s idle chat sessions", len(stale))

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = [
    "AssistantClient",
    "ChatSession",
    "ChatSessionRegistry",
    "ChatTurn",
    "analyze_image_for_display",
]
