from __future__ import annotations

import asyncio
from typing import Callable, Optional

import pandas as pd

from core.assistant import NO_MATCHES_SUMMARY, generate_innovation_summary


SUMMARY_DEBOUNCE_SECONDS = 0.8

Summarizer = Callable[[pd.DataFrame], str]


class SummaryCoordinator:
    """Debounced summary requests where only the newest filter state wins.

    Every request bumps a generation counter. A request waits out the
    debounce window, then checks whether it is still the newest before
    calling the summarizer and again before publishing the result.
    Superseded requests resolve to None; the underlying call is never
    aborted.
    """

    def __init__(self, summarize: Summarizer = generate_innovation_summary, delay: float = SUMMARY_DEBOUNCE_SECONDS):
        self._summarize = summarize
        self.delay = delay
        self._generation = 0
        self.latest: Optional[str] = None

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def request(self, records: pd.DataFrame) -> Optional[str]:
        generation = self.invalidate()
        if records.empty:
            self.latest = NO_MATCHES_SUMMARY
            return self.latest

        await asyncio.sleep(self.delay)
        if not self.is_current(generation):
            return None

        summary = await asyncio.to_thread(self._summarize, records)
        if not self.is_current(generation):
            return None
        self.latest = summary
        return summary
