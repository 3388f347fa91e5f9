from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import mock

import discord

from routing.threads import find_latest_summary
from routing.threads import get_or_create_active_thread
from routing.threads import thread_name_for
from discord_fakes import FakeGuild
from discord_fakes import FakeThread
from discord_fakes import FakeUser


def _embed(description: str, title: str = "📺 YouTube Link"):
    return discord.Embed(title=title, description=description)


class ThreadNameTests(unittest.TestCase):
    def test_uses_host_and_path_of_first_url(self):
        name = thread_name_for(_embed("https://www.youtube.com/watch?v=abc\n\n**Posted by:** <@1>"))
        self.assertEqual(name, "💬 www.youtube.com/watch")

    def test_falls_back_to_title(self):
        self.assertEqual(thread_name_for(_embed("not a url")), "💬 📺 YouTube Link")
        self.assertEqual(thread_name_for(SimpleNamespace(title=None, description=None)), "💬 Link Discussion")

    def test_truncated_to_limit(self):
        name = thread_name_for(_embed("https://example.com/" + "a" * 300))
        self.assertEqual(len(name), 100)


class ThreadConsolidatorTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.guild = FakeGuild()
        self.room = self.guild.add_channel("youtube")
        self.bot_id = self.guild.me.id
        self.member = FakeUser(name="bob")

    async def _summary(self, url: str = "https://youtu.be/abc"):
        return await self.room.send(embed=_embed(f"{url}\n\n**Posted by:** <@1>"))

    async def test_empty_room_returns_none(self):
        self.room.post(self.member, "hello?")
        thread = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        self.assertIsNone(thread)

    async def test_creates_thread_on_latest_summary(self):
        await self._summary("https://youtu.be/old")
        latest = await self._summary("https://youtu.be/new")
        self.room.post(self.member, "chatter after the link")

        thread = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        self.assertIsNotNone(thread)
        self.assertEqual(thread.id, latest.id)
        self.assertEqual(thread.name, "💬 youtu.be/new")
        self.assertEqual(thread.auto_archive_duration, 1440)

    async def test_repeated_calls_return_same_thread(self):
        await self._summary()
        first = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        second = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        self.assertIs(first, second)
        self.assertEqual(len(self.room.created_threads), 1)

    async def test_new_summary_moves_active_thread(self):
        await self._summary("https://youtu.be/one")
        first = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        await self._summary("https://youtu.be/two")
        second = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(len(self.room.created_threads), 2)

    async def test_archived_thread_is_reopened(self):
        await self._summary()
        thread = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        thread.archived = True

        again = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        self.assertIs(again, thread)
        self.assertFalse(again.archived)
        self.assertEqual(thread.edits, [{"archived": False}])

    async def test_uncached_archived_thread_is_fetched(self):
        anchor = await self._summary()
        archived = FakeThread(anchor.id, "💬 old", self.room, archived=True)
        self.guild.threads[archived.id] = archived
        anchor.flags.has_thread = True

        thread = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        self.assertIs(thread, archived)
        self.assertFalse(thread.archived)
        self.assertEqual(self.guild.fetch_calls, [anchor.id])
        self.assertEqual(self.room.created_threads, [])

    async def test_deleted_thread_is_recreated(self):
        anchor = await self._summary()
        anchor.flags.has_thread = True  # thread id no longer resolves

        thread = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        self.assertEqual(thread.id, anchor.id)
        self.assertEqual(len(self.room.created_threads), 1)

    async def test_ignores_other_authors_embeds(self):
        other_bot = FakeUser(name="otherbot", bot=True)
        self.room.post(other_bot, "", embeds=[_embed("https://example.com")])
        self.assertIsNone(await find_latest_summary(self.room, self.bot_id))

    async def test_scan_window_is_bounded(self):
        await self._summary()
        for i in range(5):
            self.room.post(self.member, f"msg {i}")
        self.assertIsNone(await find_latest_summary(self.room, self.bot_id, limit=5))
        self.assertIsNotNone(await find_latest_summary(self.room, self.bot_id, limit=6))

    async def test_concurrent_creation_reuses_winner(self):
        anchor = await self._summary()
        winner = FakeThread(anchor.id, "💬 youtu.be/abc", self.room)
        self.guild.threads[winner.id] = winner
        anchor.fail_create_thread = True

        with mock.patch("routing.threads.discord.Thread", FakeThread):
            thread = await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)
        self.assertIs(thread, winner)

    async def test_creation_failure_without_winner_propagates(self):
        anchor = await self._summary()
        anchor.fail_create_thread = True
        with self.assertRaises(discord.HTTPException):
            await get_or_create_active_thread(self.room, bot_user_id=self.bot_id)


if __name__ == "__main__":
    unittest.main()
