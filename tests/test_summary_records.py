from __future__ import annotations

import unittest
from datetime import datetime, timezone

from routing.categories import categories_by_key
from routing.categories import default_categories
from routing.summary import SUMMARY_FOOTER
from routing.summary import compose_summary
from routing.summary import empty_room_notice
from routing.summary import private_room_warning
from routing.summary import relocation_notice
from routing.summary import thread_redirect_notice
from routing.summary import thread_repost_body
from discord_fakes import FakeGuild
from discord_fakes import FakeUser


class SummaryRecordTests(unittest.TestCase):
    def setUp(self):
        self.categories = categories_by_key(default_categories())
        self.guild = FakeGuild()
        self.general = self.guild.add_channel("general")
        self.author = FakeUser(4242, "alice", display_name="Alice A.")
        self.now = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)

    def test_live_record_description(self):
        record = compose_summary(
            self.categories["youtube"],
            ["https://youtu.be/a", "https://youtu.be/b"],
            self.author,
            origin_channel=self.general,
            now=self.now,
        )
        self.assertEqual(
            record.description(),
            "https://youtu.be/a\nhttps://youtu.be/b\n\n"
            f"**Posted by:** <@4242>\n**From:** <#{self.general.id}>",
        )
        self.assertEqual(record.display_timestamp, self.now)
        self.assertEqual(record.author_name, "Alice A.")

    def test_backfilled_record_shows_original_date(self):
        original = datetime(2026, 1, 15, 18, 30, tzinfo=timezone.utc)
        record = compose_summary(
            self.categories["other"],
            ["https://example.com"],
            self.author,
            origin_channel=self.general,
            original_timestamp=original,
            now=self.now,
        )
        self.assertIn(f"**Original date:** <t:{int(original.timestamp())}:f>", record.description())
        self.assertEqual(record.display_timestamp, original)

    def test_without_origin_channel(self):
        record = compose_summary(self.categories["steam"], ["https://store.steampowered.com/app/1"], self.author, now=self.now)
        self.assertNotIn("**From:**", record.description())
        self.assertIsNone(record.origin_channel_id)

    def test_compose_is_deterministic(self):
        kwargs = dict(origin_channel=self.general, now=self.now)
        a = compose_summary(self.categories["youtube"], ["https://youtu.be/a"], self.author, **kwargs)
        b = compose_summary(self.categories["youtube"], ["https://youtu.be/a"], self.author, **kwargs)
        self.assertEqual(a, b)

    def test_to_embed(self):
        record = compose_summary(
            self.categories["youtube"],
            ["https://youtu.be/a"],
            self.author,
            origin_channel=self.general,
            now=self.now,
        )
        embed = record.to_embed()
        self.assertEqual(embed.title, "📺 YouTube Link")
        self.assertEqual(embed.colour.value, 0xFF0000)
        self.assertEqual(embed.author.name, "Alice A.")
        self.assertTrue(embed.author.icon_url.endswith("size=64"))
        self.assertTrue(embed.thumbnail.url.endswith("size=128"))
        self.assertEqual(embed.footer.text, SUMMARY_FOOTER)
        self.assertEqual(embed.timestamp, self.now)
        self.assertTrue(embed.description.startswith("https://youtu.be/a\n"))


class NoticeTextTests(unittest.TestCase):
    def setUp(self):
        self.categories = categories_by_key(default_categories())

    def test_relocation_notice_lists_each_category(self):
        text = relocation_notice(1, [(self.categories["youtube"], 10), (self.categories["steam"], 20)])
        lines = text.split("\n")
        self.assertEqual(len(lines), 2)
        self.assertIn("YouTube link detected, moved to <#10>", lines[0])
        self.assertIn("Steam link detected, moved to <#20>", lines[1])
        self.assertTrue(all("<@1>" in line for line in lines))

    def test_short_notices_mention_author(self):
        self.assertIn("<@5>", private_room_warning(5))
        self.assertIn("<#9>", thread_redirect_notice(5, 9))
        self.assertIn("No links have been posted yet", empty_room_notice(5))

    def test_repost_body_quotes_every_line(self):
        body = thread_repost_body("Alice", "first\nsecond")
        self.assertEqual(body, "**Alice** said:\n> first\n> second")

    def test_repost_body_without_text(self):
        self.assertEqual(thread_repost_body("Alice", ""), "**Alice** said:\n> *(no text)*")

    def test_repost_body_is_capped(self):
        body = thread_repost_body("Alice", "x" * 5000, limit=100)
        self.assertEqual(len(body), 100)
        self.assertTrue(body.endswith("..."))


if __name__ == "__main__":
    unittest.main()
