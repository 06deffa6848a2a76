"""Community-to-space conversion.

The orchestrator runs one command invocation end to end:

1. No argument: reply with help and stop (no progress marker).
2. Place the progress marker.
3. Run the guards (already converted, membership, authorization).
4. Build the space: profile, avatar, child rooms, admin power levels,
   alias, admin invites, and finally the bot's own demotion.
5. Report exactly one outcome; the marker is removed on every path.

Two invocations for the same community that arrive together can both pass
the alias check before either registers the alias, and both will then try
to create a space. Nothing here serializes them.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from spaceconvert.config.schema import BotConfig
from spaceconvert.convert.guards import DEFAULT_GUARDS, ConversionContext, Guard
from spaceconvert.convert.identity import BotIdentity
from spaceconvert.convert.matcher import CommandInvocation
from spaceconvert.convert.outcome import StepKind, StepOutcome
from spaceconvert.convert.progress import ProgressMarker
from spaceconvert.convert.reporter import GENERIC_ERROR, SUCCESS, OutcomeReporter, help_notice
from spaceconvert.matrix.transport import MatrixTransport
from spaceconvert.utils.ids import routing_server, space_alias_for

POWER_LEVELS = "m.room.power_levels"
ROOM_AVATAR = "m.room.avatar"


class ConversionOrchestrator:
    """Converts a legacy community into a space on behalf of one of its admins."""

    def __init__(
        self,
        transport: MatrixTransport,
        identity: BotIdentity,
        config: BotConfig | None = None,
        guards: tuple[Guard, ...] = DEFAULT_GUARDS,
    ):
        self.transport = transport
        self.identity = identity
        self.config = config or BotConfig()
        self.guards = guards

    def alias_for(self, group_id: str) -> str:
        return space_alias_for(group_id, self.identity.server, self.config.alias_prefix)

    async def handle(self, invocation: CommandInvocation) -> StepOutcome:
        """Process one invocation and report its outcome to the user."""
        message = invocation.message
        reporter = OutcomeReporter(self.transport, message.room_id, message.event_id)

        group_id = invocation.group_id
        if not group_id:
            notice = help_notice(self.config.command_prefix)
            await reporter.report(notice)
            return StepOutcome.stop(notice)

        ctx = ConversionContext(
            room_id=message.room_id,
            event_id=message.event_id,
            sender=message.sender,
            group_id=group_id,
            alias=self.alias_for(group_id),
        )
        logger.info(f"{ctx.sender} asked to convert {group_id} in {ctx.room_id}")

        marker = ProgressMarker(
            self.transport, ctx.room_id, ctx.event_id, self.config.progress_reaction
        )
        try:
            async with marker:
                outcome = await self._run(ctx, marker)
        except Exception as e:
            logger.exception(f"Error converting {group_id} for {ctx.sender}: {e}")
            outcome = StepOutcome.fault(e)

        await reporter.report(outcome.notice if outcome.kind is StepKind.STOP else GENERIC_ERROR)
        return outcome

    async def _run(self, ctx: ConversionContext, marker: ProgressMarker) -> StepOutcome:
        for guard in self.guards:
            outcome = await guard(self.transport, ctx)
            if not outcome.proceeds:
                return outcome
        return await self._convert(ctx, marker)

    async def _convert(self, ctx: ConversionContext, marker: ProgressMarker) -> StepOutcome:
        t = self.transport
        cfg = self.config

        profile = await t.get_group_profile(ctx.group_id)
        ctx.space_id = space_id = await t.create_space(
            name=profile.get("name") or f"{ctx.sender}'s Space",
            topic=profile.get("short_description") or "",
            is_public=bool(profile.get("is_openly_joinable")),
        )
        logger.info(f"Created space {space_id} for {ctx.group_id}")

        if profile.get("avatar_url"):
            await t.send_state_event(space_id, ROOM_AVATAR, {"url": profile["avatar_url"]})

        rooms = await t.get_group_rooms(ctx.group_id)
        for room in rooms:
            server = routing_server(room.get("canonical_alias"), ctx.sender)
            await t.add_child_room(space_id, room["room_id"], via=[server])
        logger.debug(f"Attached {len(rooms)} rooms to {space_id}")

        # The bot keeps its own level until every privileged step is done
        power_levels: dict[str, Any] = await t.get_state_event(space_id, POWER_LEVELS)
        users = power_levels.setdefault("users", {})
        for admin in ctx.admins:
            users[admin] = cfg.admin_level
        await t.send_state_event(space_id, POWER_LEVELS, power_levels)

        await t.create_alias(ctx.alias, space_id)

        for admin in ctx.admins:
            await t.invite_user(space_id, admin)

        users[self.identity.user_id] = cfg.demoted_level
        await t.send_state_event(space_id, POWER_LEVELS, power_levels)

        await t.react(ctx.room_id, ctx.event_id, cfg.success_reaction)
        await marker.clear()

        logger.info(f"Converted {ctx.group_id} into {space_id} ({ctx.alias})")
        return StepOutcome.stop(SUCCESS)
