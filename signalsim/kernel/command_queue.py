import logging
from collections import deque
from typing import Any, Deque
from signalsim.application.commands import Command

log = logging.getLogger(__name__)

class CommandQueue:
    """Commands posted between ticks, applied together at the start of the next one."""

    def __init__(self):
        self._pending: Deque[Command] = deque()

    def add(self, command: Command):
        self._pending.append(command)

    def run_pending(self, kernel: Any) -> int:
        # Swap first so a command that queues another defers it to the next tick
        batch, self._pending = self._pending, deque()
        for command in batch:
            command.execute(kernel)
        if batch:
            log.debug("Applied %d queued command(s)", len(batch))
        return len(batch)

    def clear(self):
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
