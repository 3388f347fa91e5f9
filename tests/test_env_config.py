from __future__ import annotations

import unittest
from datetime import datetime, timezone

from config.env import env_flag
from config.env import env_float
from config.env import parse_id_set
from config.env import resolve_backfill_after
from config.env import resolve_configured_channel_ids
from config.env import resolve_token


class EnvConfigTests(unittest.TestCase):
    def test_token_prefers_discord_token(self):
        env = {"DISCORD_TOKEN": " abc ", "DISCORD_BOT_TOKEN": "xyz"}
        self.assertEqual(resolve_token(env), "abc")
        self.assertEqual(resolve_token({"DISCORD_BOT_TOKEN": "xyz"}), "xyz")

    def test_missing_or_placeholder_token_is_fatal(self):
        with self.assertRaises(RuntimeError):
            resolve_token({})
        with self.assertRaises(RuntimeError):
            resolve_token({"DISCORD_TOKEN": "your_bot_token_here"})

    def test_configured_channel_ids(self):
        env = {
            "LINKROUTER_YOUTUBE_CHANNEL_ID": "123456789012345678",
            "LINKROUTER_STEAM_CHANNEL_ID": "your_channel_id",
        }
        out = resolve_configured_channel_ids("LINKROUTER_", ["youtube", "steam", "other"], env)
        self.assertEqual(out, {"youtube": 123456789012345678, "steam": None, "other": None})

    def test_backfill_after(self):
        default = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(resolve_backfill_after(None), default)
        self.assertEqual(resolve_backfill_after("not a date"), default)
        self.assertEqual(
            resolve_backfill_after("2026-06-01T00:00:00Z"),
            datetime(2026, 6, 1, tzinfo=timezone.utc),
        )

    def test_flags_and_floats(self):
        self.assertTrue(env_flag("X", True, {}))
        self.assertFalse(env_flag("X", True, {"X": "0"}))
        self.assertTrue(env_flag("X", False, {"X": "1"}))
        self.assertEqual(env_float("P", 1.0, {"P": "2.5"}), 2.5)
        self.assertEqual(env_float("P", 1.0, {"P": "-3"}), 1.0)
        self.assertEqual(env_float("P", 1.0, {"P": "soon"}), 1.0)

    def test_parse_id_set(self):
        self.assertEqual(parse_id_set("123456789012, 987654321098;bogus"), {123456789012, 987654321098})
        self.assertEqual(parse_id_set(None), set())


if __name__ == "__main__":
    unittest.main()
