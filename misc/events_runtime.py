from __future__ import annotations

import asyncio
from typing import Any

import discord
from discord.ext import commands
from misc.runtime_deps import RuntimeBootDeps
from misc.runtime_deps import RuntimeDeps


async def _run_backfill(guild: Any, boot: RuntimeBootDeps) -> None:
    try:
        await boot.backfill_guild_func(guild)
    except Exception as e:
        print(f"[Backfill] guild {guild.id} aborted: {e}")


def start_backfill_task(bot: commands.Bot, guild: Any, boot: RuntimeBootDeps) -> asyncio.Task | None:
    tasks: dict[int, asyncio.Task] | None = getattr(bot, "_backfill_tasks", None)
    if tasks is None:
        tasks = {}
        bot._backfill_tasks = tasks

    running = tasks.get(int(guild.id))
    if running is not None and not running.done():
        return None

    task = asyncio.create_task(_run_backfill(guild, boot))
    tasks[int(guild.id)] = task
    return task


def print_pinning_hint(deps: RuntimeDeps, guild: Any) -> None:
    lines = deps.registry.pinning_lines(deps.env_prefix, guild.id)
    if not lines:
        return
    print("[Registry] Channel IDs (set these env vars to pin them on future runs):")
    for line in lines:
        print(f"[Registry]   {line}")


async def setup_guild(guild: Any, *, bot: commands.Bot, deps: RuntimeDeps, boot: RuntimeBootDeps) -> None:
    print(f"[Registry] Setting up guild {getattr(guild, 'name', '?')} ({guild.id})")
    await deps.registry.ensure_all(guild)
    print_pinning_hint(deps, guild)
    if boot.backfill_enabled:
        start_backfill_task(bot, guild, boot)


def register_runtime_events(
    bot: commands.Bot,
    *,
    deps: RuntimeDeps,
    boot: RuntimeBootDeps,
) -> None:
    @bot.event
    async def on_ready():
        print(f"Link Router is online as {bot.user}")
        # on_ready fires again after reconnects; setup is once per process.
        if getattr(bot, "_link_router_booted", False):
            return
        bot._link_router_booted = True

        for guild in list(bot.guilds):
            await setup_guild(guild, bot=bot, deps=deps, boot=boot)
        print("[Router] Now listening for new messages")

    @bot.event
    async def on_guild_join(guild: discord.Guild):
        await setup_guild(guild, bot=bot, deps=deps, boot=boot)

    @bot.event
    async def on_message(message: discord.Message):
        if message.author.bot:
            return

        if (message.content or "").lstrip().startswith(str(bot.command_prefix)):
            ctx = await bot.get_context(message)
            if ctx.valid:
                await bot.invoke(ctx)
                return

        try:
            await deps.router.handle_message(message)
        except Exception as e:
            print(f"[Router] Error handling message {message.id}: {e}")
