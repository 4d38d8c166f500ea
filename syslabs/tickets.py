"""Lottery ticket pool."""

from __future__ import annotations

import random
from typing import Iterable, Sequence

MAX_TICKETS = 20


class TicketPool:
    """Tickets that can still be handed out, and tickets held by jobs."""

    def __init__(self, size: int = MAX_TICKETS, rng: random.Random | None = None):
        self.available: list[int] = list(range(size))
        self.assigned: list[int] = []
        self.rng = rng if rng is not None else random.Random()

    def draw(self) -> int:
        """Take a random free ticket and mark it as assigned."""
        if not self.available:
            raise IndexError("no tickets left")
        ticket = self.available.pop(self.rng.randrange(len(self.available)))
        self.assigned.append(ticket)
        return ticket

    def release(self, tickets: Iterable[int]) -> None:
        """Return tickets to the free pool."""
        for ticket in tickets:
            self.available.append(ticket)
            if ticket in self.assigned:
                self.assigned.remove(ticket)

    def pick_winner(self) -> int:
        """Choose one assigned ticket at random."""
        if not self.assigned:
            raise IndexError("no tickets assigned")
        return self.rng.choice(self.assigned)


def find_owner(jobs: Sequence, ticket: int) -> int | None:
    """Index of the first job holding the ticket, or None."""
    return next(
        (index for index, job in enumerate(jobs) if ticket in job.tickets), None
    )