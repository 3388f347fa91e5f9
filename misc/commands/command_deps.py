from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Callable


def _default_false(*args, **kwargs) -> bool:
    return False


@dataclass(frozen=True)
class CommandDeps:
    registry: Any = None
    env_prefix: str = "LINKROUTER_"
    start_backfill: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class CommandGates:
    user_is_operator: Callable[[Any], bool] = _default_false
