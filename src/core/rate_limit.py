"""Command cooldowns - Pure functions.

This module decides whether a user may run an on-demand command again
(e.g. requesting an immediate earthquake update). All functions are pure;
the caller owns the state and the clock.
"""

import math
from dataclasses import dataclass, field


@dataclass
class CooldownState:
    """Last use per command per user.

    Attributes:
        last_used: command name -> user id -> timestamp (seconds)
    """
    last_used: dict[str, dict[str, float]] = field(default_factory=dict)


@dataclass(frozen=True)
class CooldownResult:
    """Result of checking a cooldown.

    Attributes:
        limited: Whether the user must wait
        time_remaining: Whole seconds left to wait (0 if not limited)
    """
    limited: bool
    time_remaining: int


def check_cooldown(
    command: str,
    user_id: str,
    cooldown_seconds: float,
    state: CooldownState,
    now: float,
) -> CooldownResult:
    """Check if a user is still on cooldown for a command.

    Pure function.

    Args:
        command: Command name
        user_id: User requesting the command
        cooldown_seconds: Cooldown length
        state: Current cooldown state
        now: Current time in seconds

    Returns:
        CooldownResult
    """
    last_used = state.last_used.get(command, {}).get(user_id)
    if last_used is None:
        return CooldownResult(limited=False, time_remaining=0)

    remaining = cooldown_seconds - (now - last_used)
    if remaining > 0:
        return CooldownResult(limited=True, time_remaining=math.ceil(remaining))

    return CooldownResult(limited=False, time_remaining=0)


def record_use(
    command: str,
    user_id: str,
    cooldown_seconds: float,
    state: CooldownState,
    now: float,
) -> CooldownState:
    """Record a command use and return updated state.

    Pure function - returns new state without modifying input. Entries for
    the command whose cooldown has expired are dropped so the state stays
    bounded.

    Args:
        command: Command name
        user_id: User who ran the command
        cooldown_seconds: Cooldown length
        state: Current cooldown state
        now: Current time in seconds

    Returns:
        New state including this use
    """
    command_uses = {
        user: used_at
        for user, used_at in state.last_used.get(command, {}).items()
        if now - used_at <= cooldown_seconds
    }
    command_uses[user_id] = now

    last_used = dict(state.last_used)
    last_used[command] = command_uses
    return CooldownState(last_used=last_used)


def reset_cooldown(command: str, user_id: str, state: CooldownState) -> CooldownState:
    """Remove a user's cooldown for a command.

    Pure function.
    """
    command_uses = dict(state.last_used.get(command, {}))
    command_uses.pop(user_id, None)

    last_used = dict(state.last_used)
    last_used[command] = command_uses
    return CooldownState(last_used=last_used)


def format_cooldown(seconds: int) -> str:
    """Format a wait time, e.g. "45s", "2m", "1m 30s".

    Pure function.
    """
    if seconds >= 60:
        minutes, remaining_seconds = divmod(seconds, 60)
        if remaining_seconds > 0:
            return f"{minutes}m {remaining_seconds}s"
        return f"{minutes}m"
    return f"{seconds}s"
