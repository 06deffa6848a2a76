"""Tests for the pre-conversion guards."""

import pytest

from spaceconvert.convert.guards import (
    ConversionContext,
    check_authorized,
    check_not_converted,
    ensure_membership,
)
from spaceconvert.convert.outcome import StepKind
from spaceconvert.convert.reporter import ALREADY_CONVERTED, CANNOT_JOIN, NOT_ADMIN
from spaceconvert.matrix.errors import MatrixRequestError

from conftest import ADMIN, GROUP, MEMBER, OTHER_ADMIN

ALIAS = "#spaceconvert_+example_example.org:bot.server"


@pytest.fixture
def ctx():
    return ConversionContext(
        room_id="!command:example.org",
        event_id="$cmd",
        sender=ADMIN,
        group_id=GROUP,
        alias=ALIAS,
    )


class TestIdempotencyGuard:

    @pytest.mark.asyncio
    async def test_unregistered_alias_proceeds(self, transport, ctx):
        """A not-found alias means the community still needs converting."""
        outcome = await check_not_converted(transport, ctx)
        assert outcome.proceeds

    @pytest.mark.asyncio
    async def test_registered_alias_stops(self, transport, ctx):
        """An existing alias stops with the already-converted reply."""
        transport.aliases[ALIAS] = "!existing:bot.server"
        outcome = await check_not_converted(transport, ctx)
        assert outcome.kind is StepKind.STOP
        assert outcome.notice is ALREADY_CONVERTED

    @pytest.mark.asyncio
    async def test_transport_error_is_not_treated_as_not_found(self, transport, ctx):
        """Other lookup failures reach the top-level handler."""
        transport.fail_on["resolve_alias"] = MatrixRequestError("resolve_alias", "M_UNKNOWN", "down")
        with pytest.raises(MatrixRequestError):
            await check_not_converted(transport, ctx)

    @pytest.mark.asyncio
    async def test_connection_error_is_raised_unchanged(self, transport, ctx):
        """A non-Matrix failure is re-raised as the same exception."""
        error = ConnectionError("reset by peer")
        transport.fail_on["resolve_alias"] = error
        with pytest.raises(ConnectionError) as exc_info:
            await check_not_converted(transport, ctx)
        assert exc_info.value is error


class TestMembershipGuard:

    @pytest.mark.asyncio
    async def test_already_joined(self, transport, ctx):
        """No join attempt when the bot is already a member."""
        transport.joined_groups.append(GROUP)
        outcome = await ensure_membership(transport, ctx)
        assert outcome.proceeds
        assert "join_group" not in transport.operations()

    @pytest.mark.asyncio
    async def test_direct_join(self, transport, ctx):
        """An openly joinable community is joined without touching invites."""
        transport.joinable_groups.add(GROUP)
        outcome = await ensure_membership(transport, ctx)
        assert outcome.proceeds
        assert "accept_group_invite" not in transport.operations()

    @pytest.mark.asyncio
    async def test_falls_back_to_invite(self, transport, ctx):
        """A rejected join is followed by accepting the pending invite."""
        transport.invited_groups.add(GROUP)
        outcome = await ensure_membership(transport, ctx)
        assert outcome.proceeds
        assert transport.operations() == ["get_joined_groups", "join_group", "accept_group_invite"]

    @pytest.mark.asyncio
    async def test_both_strategies_fail(self, transport, ctx):
        """Exactly one attempt of each kind before asking for an invite."""
        outcome = await ensure_membership(transport, ctx)
        assert outcome.kind is StepKind.STOP
        assert outcome.notice is CANNOT_JOIN
        ops = transport.operations()
        assert ops.count("join_group") == 1
        assert ops.count("accept_group_invite") == 1

    @pytest.mark.asyncio
    async def test_join_connection_error_still_tries_invite(self, transport, ctx):
        """A network failure on the join counts as a failed attempt."""
        transport.invited_groups.add(GROUP)
        transport.fail_on["join_group"] = ConnectionError("reset by peer")
        outcome = await ensure_membership(transport, ctx)
        assert outcome.proceeds
        assert transport.operations() == ["get_joined_groups", "join_group", "accept_group_invite"]

    @pytest.mark.asyncio
    async def test_non_matrix_failures_end_in_cannot_join(self, transport, ctx):
        """Two failed attempts of any kind give the invite-me reply."""
        transport.fail_on["join_group"] = ConnectionError("reset by peer")
        transport.fail_on["accept_group_invite"] = TimeoutError()
        outcome = await ensure_membership(transport, ctx)
        assert outcome.notice is CANNOT_JOIN
        assert transport.operations().count("accept_group_invite") == 1

    @pytest.mark.asyncio
    async def test_joined_groups_failure_propagates(self, transport, ctx):
        """Failing to list joined communities is not a join failure."""
        transport.fail_on["get_joined_groups"] = MatrixRequestError("get_joined_groups", "M_UNKNOWN")
        with pytest.raises(MatrixRequestError):
            await ensure_membership(transport, ctx)


class TestAuthorizationGuard:

    @pytest.fixture(autouse=True)
    def group(self, transport):
        transport.add_group(GROUP, users=[
            {"user_id": ADMIN, "is_privileged": True},
            {"user_id": OTHER_ADMIN, "is_privileged": True},
            {"user_id": MEMBER, "is_privileged": False},
            {"user_id": "@dave:example.org"},
        ])

    @pytest.mark.asyncio
    async def test_admin_allowed(self, transport, ctx):
        """Privileged members pass and are recorded in order."""
        outcome = await check_authorized(transport, ctx)
        assert outcome.proceeds
        assert ctx.admins == [ADMIN, OTHER_ADMIN]

    @pytest.mark.asyncio
    async def test_member_rejected(self, transport, ctx):
        """An ordinary member gets the not-an-admin reply."""
        ctx.sender = MEMBER
        outcome = await check_authorized(transport, ctx)
        assert outcome.kind is StepKind.STOP
        assert outcome.notice is NOT_ADMIN

    @pytest.mark.asyncio
    async def test_outsider_rejected(self, transport, ctx):
        """Someone outside the community is rejected the same way."""
        ctx.sender = "@mallory:evil.org"
        outcome = await check_authorized(transport, ctx)
        assert outcome.notice is NOT_ADMIN
