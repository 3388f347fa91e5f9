from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class RuntimeDeps:
    # routing
    registry: Any
    router: Any

    # operator echo
    env_prefix: str


@dataclass(frozen=True)
class RuntimeBootDeps:
    backfill_enabled: bool
    backfill_guild_func: Callable
