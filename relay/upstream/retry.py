"""Bounded reconnect schedule.

The sequence is fixed: one delayed attempt preferring the ephemeral
credential, then one shorter-delayed attempt on the static key. There is no
third attempt and no exponential growth.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import RECONNECT_DELAY_S, RECONNECT_FALLBACK_DELAY_S


@dataclass(frozen=True, slots=True)
class ReconnectStep:
    delay_s: float
    prefer_ephemeral: bool


class ReconnectPolicy:
    def __init__(
        self,
        delay_s: float = RECONNECT_DELAY_S,
        fallback_delay_s: float = RECONNECT_FALLBACK_DELAY_S,
    ) -> None:
        self._steps = (
            ReconnectStep(delay_s=float(delay_s), prefer_ephemeral=True),
            ReconnectStep(delay_s=float(fallback_delay_s), prefer_ephemeral=False),
        )

    def steps(self) -> tuple[ReconnectStep, ...]:
        return self._steps

    def __len__(self) -> int:
        return len(self._steps)


__all__ = ["ReconnectPolicy", "ReconnectStep"]
