import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from altari_bot.config.settings import Settings


class TestBotSettings(unittest.TestCase):
    def test_missing_bot_token_fails_validation(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValidationError):
                Settings.from_env()

    def test_valid_env_loads_settings(self):
        env = {
            "CHEAP_ALTARI_BOT_TOKEN": "123:abc",
            "CHEAP_ALTARI_BOT_GITHUB_WEBHOOK_SECRET": "push-secret",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        self.assertEqual(settings.BOT_TOKEN, "123:abc")
        self.assertEqual(settings.GITHUB_WEBHOOK_SECRET, "push-secret")
        self.assertFalse(settings.SERVER_DEV)
        self.assertEqual(settings.listen_port, 21093)
        self.assertEqual(settings.KIS_PROXY_URL, "http://localhost:26704")

    def test_dev_flag_selects_plain_http_port(self):
        env = {"CHEAP_ALTARI_BOT_TOKEN": "123:abc", "CHEAP_ALTARI_BOT_SERVER_DEV": "1"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        self.assertTrue(settings.SERVER_DEV)
        self.assertEqual(settings.listen_port, 21092)

    def test_dev_flag_only_accepts_one(self):
        env = {"CHEAP_ALTARI_BOT_TOKEN": "123:abc", "CHEAP_ALTARI_BOT_SERVER_DEV": "true"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        self.assertFalse(settings.SERVER_DEV)

    def test_overrides_ports_and_proxy_url(self):
        env = {
            "CHEAP_ALTARI_BOT_TOKEN": "123:abc",
            "CHEAP_ALTARI_BOT_HTTPS_PORT": "8443",
            "CHEAP_ALTARI_BOT_KIS_PROXY_URL": "http://kis-proxy:9000",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        self.assertEqual(settings.listen_port, 8443)
        self.assertEqual(settings.KIS_PROXY_URL, "http://kis-proxy:9000")


if __name__ == "__main__":
    unittest.main()
