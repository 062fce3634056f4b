import unittest
from unittest.mock import MagicMock

import requests

from altari_bot.integrations.telegram_bot import BotPoller, TelegramBotClient
from altari_bot.services.commands import BotReply


def _ok_response(result):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"ok": True, "result": result}
    return response


class TestTelegramBotClient(unittest.TestCase):
    def test_send_message_uses_markdown_v2(self):
        session = MagicMock()
        session.post.return_value = _ok_response({"message_id": 1})
        client = TelegramBotClient("123:abc", session=session, base_url="https://example.test")

        client.send_message(42, "*X*")

        session.post.assert_called_once_with(
            "https://example.test/bot123:abc/sendMessage",
            timeout=10,
            json={
                "chat_id": 42,
                "text": "*X*",
                "parse_mode": "MarkdownV2",
                "disable_web_page_preview": False,
            },
        )

    def test_get_updates_long_polls_from_offset(self):
        session = MagicMock()
        session.post.return_value = _ok_response([])
        client = TelegramBotClient("123:abc", session=session, base_url="https://example.test", poll_timeout_sec=60)

        self.assertEqual(client.get_updates(offset=7), [])
        kwargs = session.post.call_args.kwargs
        self.assertEqual(kwargs["json"], {"offset": 7, "timeout": 60})
        self.assertEqual(kwargs["timeout"], 65)

    def test_api_error_is_raised(self):
        session = MagicMock()
        response = MagicMock()
        response.raise_for_status.return_value = None
        response.json.return_value = {"ok": False, "description": "Bad Request: can't parse entities"}
        session.post.return_value = response
        client = TelegramBotClient("123:abc", session=session)

        with self.assertRaises(RuntimeError):
            client.send_message(1, "*broken")

    def test_token_is_required(self):
        with self.assertRaises(ValueError):
            TelegramBotClient("")


class TestBotPoller(unittest.TestCase):
    def test_dispatches_messages_and_advances_offset(self):
        client = MagicMock()
        client.get_updates.return_value = [
            {"update_id": 10, "message": {"text": "/k", "chat": {"id": 5}, "from": {"username": "u"}}},
            {"update_id": 11, "edited_message": {"text": "/k"}},
            {
                "update_id": 12,
                "message": {"text": "/k", "chat": {"id": 5}, "reply_to_message": {"text": "hi"}},
            },
        ]
        handler = MagicMock()
        handler.handle.return_value = BotReply(text="quote")
        poller = BotPoller(client, handler)

        processed = poller.poll_once()

        self.assertEqual(processed, 3)
        self.assertEqual(poller.offset, 13)
        handler.handle.assert_called_once_with("/k")
        client.send_reply.assert_called_once_with(5, BotReply(text="quote"))

    def test_blank_command_sends_nothing(self):
        client = MagicMock()
        client.get_updates.return_value = [{"update_id": 1, "message": {"text": "", "chat": {"id": 5}}}]
        handler = MagicMock()
        handler.handle.return_value = None

        BotPoller(client, handler).poll_once()

        client.send_reply.assert_not_called()

    def test_poll_errors_back_off_and_keep_running(self):
        client = MagicMock()
        sleeps = []
        poller = BotPoller(client, MagicMock(), sleep_fn=sleeps.append, error_backoff_sec=3.0)
        calls = {"count": 0}

        def get_updates(offset=0):
            calls["count"] += 1
            if calls["count"] == 1:
                raise requests.ConnectionError("network down")
            poller.stop()
            return []

        client.get_updates.side_effect = get_updates

        poller.run()

        self.assertEqual(calls["count"], 2)
        self.assertEqual(sleeps, [3.0])


if __name__ == "__main__":
    unittest.main()
