"""
Query predictor for sensors with an unknown refresh phase.

Sensors refresh their reading on a fixed but undocumented cadence. The
only signal available to us is whether a poll returned a different value
than the previous one. The predictor keeps a window ``(lower, upper)``
believed to contain the next refresh instant and narrows it by bisection:

* a poll inside the window that sees a change moves the window to the
  earlier half, advanced by one period;
* a poll inside the window that sees no change keeps the later half;
* once the window is 10 seconds wide, polls are placed just after its
  upper edge, one per period.

Polls that land outside the window (late or early, e.g. after a failed
read) either re-align the window or reset it. Resolution below 10 seconds
is not pursued.
"""
import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Smallest window width the predictor tries to resolve (seconds).
MIN_RESOLUTION = 10.0

Interval = Tuple[float, float]


class QueryPredictor:
    """
    Decides when a sensor is worth polling.

    Times are plain float seconds from a monotonic clock.
    """

    def __init__(self, period: float):
        """
        Initialize the predictor.

        Args:
            period: Nominal time between sensor refreshes in seconds.
        """
        if period < MIN_RESOLUTION:
            raise ValueError(
                f"period must be at least {MIN_RESOLUTION}s, got {period}"
            )
        self.period = period
        self._interval: Optional[Interval] = None

    @property
    def interval(self) -> Optional[Interval]:
        """Current window believed to contain the next refresh, if any."""
        return self._interval

    @property
    def next_query_point(self) -> Optional[float]:
        """Instant after which the next poll should happen."""
        if self._interval is None:
            return None

        lower, upper = self._interval
        if upper - lower <= MIN_RESOLUTION:
            return upper
        return lower + (upper - lower) / 2

    def should_poll(self, now: float) -> bool:
        """
        Check if polling at ``now`` is expected to be informative.

        Args:
            now: Current monotonic time.

        Returns:
            True before the first observation and once ``now`` is past
            the next query point.
        """
        point = self.next_query_point
        if point is None:
            return True
        return now > point

    def update(self, now: float, changed: bool) -> None:
        """
        Refine the window with the outcome of a completed poll.

        Args:
            now: Time the poll completed.
            changed: Whether the polled value differed from the previous one.
        """
        period = self.period

        if self._interval is None:
            self._interval = (now, now + period)
            return

        lower, upper = self._interval

        if lower <= now <= upper:
            if changed:
                # refresh happened before now: keep the earlier half, next cycle
                lower, upper = lower + period, now + period
            else:
                lower = now

        elif now > upper:
            if changed:
                # missed one or more cycles, realign to the cycle after now
                while upper <= now:
                    lower += period
                    upper += period
            else:
                logger.debug(
                    f"No change after expected window ({lower:.1f}, {upper:.1f}), "
                    f"resynchronizing at {now:.1f}"
                )
                lower, upper = now, now + MIN_RESOLUTION

        elif changed:
            # changed before the window even opened
            logger.debug(
                f"Unexpected change before window ({lower:.1f}, {upper:.1f}), "
                f"restarting at {now:.1f}"
            )
            lower, upper = now, now + period

        if upper - lower < MIN_RESOLUTION:
            center = lower + (upper - lower) / 2
            lower = center - MIN_RESOLUTION / 2
            upper = center + MIN_RESOLUTION / 2

        self._interval = (lower, upper)

    def __repr__(self) -> str:
        return f"QueryPredictor(period={self.period}, interval={self._interval})"
