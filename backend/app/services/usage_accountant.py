"""Days-active accounting over a resource's activity ledger.

Counts the whole calendar days a resource was active inside a query window.
A resource can be toggled several times within one calendar day, so each
interval is compared with the one before it:

- an interval closing on the same UTC day as the previous one is skipped;
- an interval opening on the same UTC day as the previous one gives back the
  day the previous interval already counted.

A resource already active when the window opens is counted from the window
start, or from its creation if that is later. An interval with no recorded
deactivation runs to the window end.
"""

import logging
import math
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from app.core.clock import Clock, utc_now
from app.core.timestamps import SECONDS_PER_DAY, utc_day
from app.core.timestamps import to_timestamp as as_epoch

logger = logging.getLogger(__name__)


class ActivityLedger(Protocol):
    def has_been_activated(self) -> bool: ...

    def get_activation_timestamps(self) -> list[int]: ...

    def get_deactivation_timestamps(self) -> list[int]: ...

    def get_date_created(self) -> datetime | None: ...


def timestamps_between(
    timestamps: Iterable[int], from_timestamp: int, to_timestamp: int
) -> list[int]:
    """Timestamps within ``[from_timestamp, to_timestamp]``, in their original order."""
    return [ts for ts in timestamps if from_timestamp <= ts <= to_timestamp]


def _was_active_at(activations: list[int], deactivations: list[int], instant: int) -> bool:
    """Whether the latest event strictly before ``instant`` is an activation."""
    last_activation = max((ts for ts in activations if ts < instant), default=None)
    if last_activation is None:
        return False
    last_deactivation = max((ts for ts in deactivations if ts < instant), default=None)
    return last_deactivation is None or last_deactivation < last_activation


def _window_start(ledger: ActivityLedger, from_timestamp: int) -> int:
    """Later of the window start and the resource's creation time."""
    date_created = ledger.get_date_created()
    if date_created is None:
        return from_timestamp
    return max(as_epoch(date_created), from_timestamp)


def days_active(
    ledger: ActivityLedger,
    from_timestamp: Any,
    to_timestamp: Any = None,
    clock: Clock = utc_now,
) -> int:
    """Number of days the resource was active between two instants.

    Args:
        ledger: Source of activation/deactivation history.
        from_timestamp: Window start (epoch seconds, ISO-8601 string or datetime).
        to_timestamp: Window end. Defaults to ``clock()``.
        clock: Supplies the current instant.

    Returns:
        Whole days active, never negative.
    """
    if not ledger.has_been_activated():
        return 0

    start = as_epoch(from_timestamp)
    end = as_epoch(clock() if to_timestamp is None else to_timestamp)
    if start > end:
        logger.debug("Inverted window %d > %d, counting no days", start, end)
        return 0

    all_activations = ledger.get_activation_timestamps()
    all_deactivations = ledger.get_deactivation_timestamps()
    activations = timestamps_between(all_activations, start, end)
    deactivations = timestamps_between(all_deactivations, start, end)

    # Already active when the window opened
    if activations and deactivations and deactivations[0] < activations[0]:
        seed = True
    elif not activations and deactivations:
        seed = True
    else:
        seed = _was_active_at(all_activations, all_deactivations, start)
    if seed:
        activations.insert(0, _window_start(ledger, start))

    total = 0
    previous_closing: int | None = None
    for i, activation in enumerate(activations):
        closing = deactivations[i] if i < len(deactivations) else end

        if previous_closing is not None and utc_day(previous_closing) == utc_day(closing):
            previous_closing = closing
            continue
        previous_closing = closing

        if closing < activation:
            logger.debug("Deactivation %d precedes activation %d, skipping", closing, activation)
        else:
            total += math.ceil((closing - activation) / SECONDS_PER_DAY)

        if i > 0 and utc_day(activations[i - 1]) == utc_day(activation):
            total -= 1

    return max(total, 0)
