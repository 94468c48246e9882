"""Curve state accessor with bounded retry for freshly created objects.

A curve created moments ago may not be visible on the read replica that
serves the next request, so "not found" is retried a fixed number of
times with a fixed delay. Every other ledger error fails immediately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from datacurve.curve.models import CurveState
from datacurve.exceptions import LedgerError, LedgerObjectNotFound, LedgerReadFailure
from datacurve.ledger.client import LedgerClient
from datacurve.logging import get_logger

logger = get_logger(__name__)


class CurveStateReader:
    """Reads CurveState from the ledger. Holds no cache.

    Args:
        ledger: Ledger client used for object reads.
        max_attempts: Total read attempts on "not found" (default 3).
        retry_delay: Seconds to wait between attempts (default 1.0).
        sleep: Awaitable sleep, injectable so tests can use a fake clock.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._ledger = ledger
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep

    async def read(self, curve_object_id: str) -> CurveState:
        """Fetch the current state of a curve.

        Raises:
            LedgerReadFailure: Object still not found after max_attempts,
                any other ledger error, or malformed curve fields.
        """
        for attempt in range(1, self._max_attempts + 1):
            try:
                obj = await self._ledger.read_object(curve_object_id)
            except LedgerObjectNotFound as e:
                if attempt == self._max_attempts:
                    logger.error(
                        "curve_read_failed_permanently",
                        curve_object_id=curve_object_id,
                        attempts=attempt,
                    )
                    raise LedgerReadFailure(
                        f"Curve {curve_object_id} not found after {attempt} attempts"
                    ) from e

                logger.warning(
                    "curve_not_found_retrying",
                    curve_object_id=curve_object_id,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    delay=self._retry_delay,
                )
                await self._sleep(self._retry_delay)
                continue
            except LedgerError as e:
                logger.error(
                    "curve_read_failed",
                    curve_object_id=curve_object_id,
                    error=str(e),
                )
                raise LedgerReadFailure(f"Failed to read curve {curve_object_id}: {e}") from e

            state = CurveState.from_fields(obj.fields)
            logger.debug(
                "curve_state_read",
                curve_object_id=curve_object_id,
                curve_id=state.curve_id,
                supply=state.total_supply_for_pricing,
            )
            return state

        raise LedgerReadFailure(f"Curve {curve_object_id} could not be read")  # Unreachable
