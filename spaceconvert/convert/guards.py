"""Pre-conversion checks.

Each guard takes the transport and the invocation's :class:`ConversionContext`
and returns a :class:`StepOutcome`. Anticipated failures become a ``stop``
with a user-facing notice; anything else propagates to the orchestrator's
top-level handler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable

from loguru import logger

from spaceconvert.convert.outcome import StepOutcome
from spaceconvert.convert.reporter import ALREADY_CONVERTED, CANNOT_JOIN, NOT_ADMIN
from spaceconvert.matrix.transport import MatrixTransport, best_effort


@dataclass
class ConversionContext:
    """Per-invocation state shared by the guards and the conversion body."""
    room_id: str
    event_id: str
    sender: str
    group_id: str
    alias: str
    admins: list[str] = field(default_factory=list)
    space_id: str | None = None


Guard = Callable[[MatrixTransport, ConversionContext], Awaitable[StepOutcome]]


async def check_not_converted(transport: MatrixTransport, ctx: ConversionContext) -> StepOutcome:
    """Stop if the community's space alias is already registered.

    Only "not found" means the community is unconverted; any other lookup
    failure is raised to the top-level handler.
    """
    result = await best_effort(transport.resolve_alias(ctx.alias), "alias lookup")
    if result.not_found:
        logger.debug(f"{ctx.alias} is not registered, {ctx.group_id} has not been converted")
        return StepOutcome.proceed()
    if not result.ok:
        raise result.error

    logger.info(f"{ctx.group_id} already converted: {ctx.alias} -> {result.value}")
    return StepOutcome.stop(ALREADY_CONVERTED)


async def ensure_membership(transport: MatrixTransport, ctx: ConversionContext) -> StepOutcome:
    """Make sure the bot is in the community, joining or accepting an invite if needed.

    The bot cannot tell an openly joinable community from an invite-only one,
    so it tries a direct join first and falls back to accepting an invite.
    Any failure of either attempt counts as a failed attempt.
    """
    joined = await transport.get_joined_groups()
    if ctx.group_id in joined:
        return StepOutcome.proceed()

    try:
        await transport.join_group(ctx.group_id)
        logger.info(f"Joined community {ctx.group_id}")
        return StepOutcome.proceed()
    except Exception as e:
        logger.warning(f"Could not join {ctx.group_id} directly: {e}")

    try:
        await transport.accept_group_invite(ctx.group_id)
        logger.info(f"Accepted invite to community {ctx.group_id}")
        return StepOutcome.proceed()
    except Exception as e:
        logger.warning(f"Could not accept an invite to {ctx.group_id}: {e}")

    return StepOutcome.stop(CANNOT_JOIN)


async def check_authorized(transport: MatrixTransport, ctx: ConversionContext) -> StepOutcome:
    """Record the community admins and stop unless the sender is one of them."""
    members = await transport.get_group_users(ctx.group_id)
    ctx.admins = [m["user_id"] for m in members if m.get("is_privileged")]

    if ctx.sender not in ctx.admins:
        logger.info(f"Refusing to convert {ctx.group_id} for non-admin {ctx.sender}")
        return StepOutcome.stop(NOT_ADMIN)
    return StepOutcome.proceed()


DEFAULT_GUARDS: tuple[Guard, ...] = (check_not_converted, ensure_membership, check_authorized)
