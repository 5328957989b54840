"""
Bidding number allocation.
Numbers come from a counter stored on the application, so replaying an
invocation reproduces the same numbers and no two quotations collide.
"""
from __future__ import annotations


class BiddingNumberAllocator:
    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError(f"bidding numbers start at 1, got {start}")
        self._next = start

    @property
    def next_number(self) -> int:
        return self._next

    def allocate(self) -> int:
        number = self._next
        self._next += 1
        return number
