"""Command loop: pulls matched commands off the bus and runs them."""

from __future__ import annotations

import asyncio

from loguru import logger

from spaceconvert.bus.events import InboundCommand
from spaceconvert.bus.queue import MessageBus
from spaceconvert.convert.orchestrator import ConversionOrchestrator


class CommandLoop:
    """
    Dispatches each inbound command to the orchestrator as its own task.

    Commands run concurrently with each other; a single command's steps run
    strictly in sequence inside its task.
    """

    def __init__(self, bus: MessageBus, orchestrator: ConversionOrchestrator):
        self.bus = bus
        self.orchestrator = orchestrator
        self._running = False
        self._tasks: set[asyncio.Task] = set()

    async def run(self) -> None:
        """Run the loop until :meth:`stop` is called."""
        self._running = True
        logger.info("Command loop started")

        while self._running:
            try:
                msg = await asyncio.wait_for(self.bus.consume_inbound(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            task = asyncio.create_task(self._process(msg))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _process(self, msg: InboundCommand) -> None:
        try:
            await self.orchestrator.handle(msg.invocation)
        except Exception as e:
            logger.error(f"Error handling command from {msg.sender} in {msg.room_id}: {e}")

    async def stop(self) -> None:
        """Stop accepting commands and wait for in-flight ones to finish."""
        self._running = False
        if self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} command(s) to finish")
            await asyncio.gather(*self._tasks, return_exceptions=True)
        logger.info("Command loop stopped")

    @property
    def in_flight(self) -> int:
        return len(self._tasks)
