from __future__ import annotations

from discord.ext import commands
from misc.commands.command_deps import CommandDeps
from misc.commands.command_deps import CommandGates
from misc.discord_timestamps import channel_mention


def register(
    bot: commands.Bot,
    *,
    deps: CommandDeps,
    gates: CommandGates,
) -> None:
    @bot.command(name="links.status")
    @commands.guild_only()
    async def cmd_links_status(ctx: commands.Context):
        if not gates.user_is_operator(ctx.author):
            await ctx.send("This command is for server admins only.")
            return

        registry = deps.registry
        guild_id = int(ctx.guild.id)
        if not registry.is_ready(guild_id):
            await ctx.send("Link destinations are still being set up for this server.")
            return

        lines = ["Link destinations:"]
        for category in registry.categories:
            binding = registry.binding(guild_id, category.key)
            if binding is None:
                lines.append(f"- {category.icon} `{category.key}`: unresolved")
            else:
                lines.append(
                    f"- {category.icon} `{category.key}`: {channel_mention(binding.channel_id)} ({binding.source})"
                )

        pins = registry.pinning_lines(deps.env_prefix, guild_id)
        if pins:
            lines.append("Pin with:")
            lines.append("```\n" + "\n".join(pins) + "\n```")
        await ctx.send("\n".join(lines)[:1900])

    @bot.command(name="links.backfill")
    @commands.guild_only()
    async def cmd_links_backfill(ctx: commands.Context):
        if not gates.user_is_operator(ctx.author):
            await ctx.send("This command is for server admins only.")
            return
        if not deps.registry.is_ready(ctx.guild.id):
            await ctx.send("Link destinations are still being set up for this server.")
            return

        task = deps.start_backfill(ctx.guild)
        if task is None:
            await ctx.send("A backfill is already running for this server.")
            return
        print(f"[Commands] backfill requested guild={ctx.guild.id} user={ctx.author.id}")
        await ctx.send("Backfill started. Relocated links will show up in their channels as it runs.")
