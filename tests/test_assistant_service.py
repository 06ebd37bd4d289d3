import json
import threading
import unittest
from unittest.mock import patch
from urllib import error

from textile_pos.config import Settings
from textile_pos.core.constants import CHAT_ERROR_TEXT, IMAGE_ERROR_TEXT
from textile_pos.core.errors import AssistantBusyError, AssistantError
from textile_pos.services.assistant_service import (
    EMPTY_CHAT_TEXT,
    GREETING_TEXT,
    SYSTEM_PROMPT,
    AssistantClient,
    ChatSession,
    ChatSessionRegistry,
    ChatTurn,
    analyze_image_for_display,
)

URLOPEN = "textile_pos.services.assistant_service.request.urlopen"


def reply_body(text):
    return json.dumps({"candidates": [{"content": {"parts": [{"text": text}]}}]}).encode("utf-8")


def make_client(**overrides):
    values = {"GEMINI_API_KEY": "test-key", "ASSISTANT_MODEL": "gemini-test"}
    values.update(overrides)
    return AssistantClient(Settings(_env_file=None, **values))


class AssistantClientTest(unittest.TestCase):
    def test_endpoint(self):
        self.assertEqual(
            make_client().endpoint,
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-test:generateContent",
        )

    def test_chat_payload_keeps_recent_successful_turns(self):
        history = [ChatTurn(role="user", text="q{}".format(i)) for i in range(7)]
        history.insert(3, ChatTurn(role="model", text="oops", is_error=True))

        payload = make_client(ASSISTANT_HISTORY_TURNS=3).build_chat_payload("latest", history)

        texts = [content["parts"][0]["text"] for content in payload["contents"]]
        self.assertEqual(texts, ["q4", "q5", "q6", "latest"])
        self.assertEqual(payload["systemInstruction"]["parts"][0]["text"], SYSTEM_PROMPT)

    def test_image_payload_inlines_base64(self):
        payload = make_client().build_image_payload(b"abc", "image/png")
        inline = payload["contents"][0]["parts"][1]["inlineData"]
        self.assertEqual(inline, {"mimeType": "image/png", "data": "YWJj"})

    def test_chat_returns_model_text(self):
        with patch(URLOPEN) as urlopen:
            urlopen.return_value.__enter__.return_value.read.return_value = reply_body("Try cotton.")
            self.assertEqual(make_client().chat("What sells in summer?"), "Try cotton.")

        sent = urlopen.call_args[0][0]
        self.assertEqual(sent.get_header("X-goog-api-key"), "test-key")

    def test_empty_reply_uses_fallback(self):
        with patch(URLOPEN) as urlopen:
            urlopen.return_value.__enter__.return_value.read.return_value = b'{"candidates": []}'
            self.assertEqual(make_client().chat("hi"), EMPTY_CHAT_TEXT)

    def test_missing_key_raises(self):
        with self.assertRaises(AssistantError):
            make_client(GEMINI_API_KEY=None).chat("hi")

    def test_http_error_raises(self):
        failure = error.URLError("connection refused")
        with patch(URLOPEN, side_effect=failure):
            with self.assertRaises(AssistantError):
                make_client().chat("hi")

    def test_image_failure_shows_fixed_text(self):
        with patch(URLOPEN, side_effect=error.URLError("down")):
            result = analyze_image_for_display(make_client(), b"\x89PNG", "image/png")
        self.assertEqual(result, {"result": IMAGE_ERROR_TEXT, "is_error": True})


class ChatSessionTest(unittest.TestCase):
    def test_session_starts_with_greeting(self):
        session = ChatSession()
        self.assertEqual(len(session.turns), 1)
        self.assertEqual(session.turns[0].text, GREETING_TEXT)

    def test_send_appends_user_and_model_turns(self):
        session = ChatSession()
        with patch(URLOPEN) as urlopen:
            urlopen.return_value.__enter__.return_value.read.return_value = reply_body("Hello!")
            reply = session.send(make_client(), "  hi  ")

        self.assertEqual(reply.text, "Hello!")
        self.assertEqual([turn.role for turn in session.turns], ["model", "user", "model"])
        self.assertEqual(session.turns[1].text, "hi")

    def test_failed_send_records_error_turn(self):
        session = ChatSession()
        reply = session.send(make_client(GEMINI_API_KEY=None), "hi")
        self.assertTrue(reply.is_error)
        self.assertEqual(reply.text, CHAT_ERROR_TEXT)
        self.assertFalse(session.busy)

    def test_empty_message_rejected(self):
        with self.assertRaises(ValueError):
            ChatSession().send(make_client(), "   ")

    def test_second_send_while_pending_is_rejected(self):
        session = ChatSession()
        started = threading.Event()
        release = threading.Event()

        class SlowClient:
            def chat(self, message, history=()):
                started.set()
                release.wait(5)
                return "done"

        worker = threading.Thread(target=session.send, args=(SlowClient(), "first"))
        worker.start()
        try:
            self.assertTrue(started.wait(5))
            with self.assertRaises(AssistantBusyError):
                session.send(SlowClient(), "second")
        finally:
            release.set()
            worker.join(5)

        self.assertEqual([turn.text for turn in session.turns[1:]], ["first", "done"])

    def test_registry_reuses_sessions(self):
        registry = ChatSessionRegistry()
        session = registry.get_or_create()
        self.assertIs(registry.get_or_create(session.id), session)
        self.assertIsNot(registry.get_or_create(), session)

    def test_registry_forgets_idle_sessions(self):
        now = [0.0]
        registry = ChatSessionRegistry(idle_seconds=600, clock=lambda: now[0])
        stale = registry.get_or_create()
        kept = registry.get_or_create()

        now[0] = 500.0
        registry.get_or_create(kept.id)
        now[0] = 700.0
        registry.get_or_create(kept.id)

        self.assertEqual(len(registry), 1)
        self.assertIsNot(registry.get_or_create(stale.id), stale)


if __name__ == "__main__":
    unittest.main()
