"""User-facing replies and the single-outcome reporter."""

from __future__ import annotations

from loguru import logger

from spaceconvert.convert.outcome import Notice
from spaceconvert.utils.html_cleaner import html_to_plain
from spaceconvert.matrix.transport import MatrixTransport

ALREADY_CONVERTED = Notice(
    body=(
        "It appears as though that community has already been converted to a Space. "
        "If this is incorrect, please contact the bot administrator."
    ),
    notice=False,
)

CANNOT_JOIN = Notice(
    body=(
        "There was an error joining your community. "
        "Please invite me to your community then try again."
    ),
)

NOT_ADMIN = Notice(body="Sorry, you are not an admin of that community.")

GENERIC_ERROR = Notice(body="There was an error processing your command")

_SUCCESS_HTML = (
    "Your community is now a space! I've made you admin, but <b>have not</b> invited your "
    "community's members just in case you'd like to change some settings first. Inviting your "
    "community members is a task left to you: typically the Space is advertised within your "
    "community rooms so people can join at their own leisure."
)

SUCCESS = Notice(body=html_to_plain(_SUCCESS_HTML), html=_SUCCESS_HTML)


def help_notice(command_prefix: str) -> Notice:
    html = (
        "This bot's sole purpose is to convert communities to spaces. "
        f"Use <code>{command_prefix} +group:example.org</code> to convert."
    )
    return Notice(body=html_to_plain(html), html=html)


class OutcomeReporter:
    """Sends the one reply a command invocation is allowed to produce.

    Only the first call to :meth:`report` reaches the room; later calls are
    logged and dropped.
    """

    def __init__(self, transport: MatrixTransport, room_id: str, event_id: str):
        self.transport = transport
        self.room_id = room_id
        self.event_id = event_id
        self.reported: Notice | None = None

    async def report(self, notice: Notice) -> bool:
        """Send ``notice`` in reply to the triggering event.

        Returns:
            False if an outcome was already reported for this invocation.
        """
        if self.reported is not None:
            logger.warning(
                f"Dropping second outcome for {self.event_id} in {self.room_id}: {notice.body[:60]!r}"
            )
            return False
        self.reported = notice
        await self.transport.send_reply(
            self.room_id,
            self.event_id,
            notice.body,
            html=notice.html,
            notice=notice.notice,
        )
        return True
