from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Callable, Iterable

from dual_deposit.application.ports.ratio_source_port import RatioSourcePort
from dual_deposit.domain.entities.ratio import ExchangeRatio
from dual_deposit.domain.exceptions import DomainError, RatioUnavailableError
from dual_deposit.domain.services.token_binding import validate_ratio


logger = logging.getLogger(__name__)

RatioCallback = Callable[[str, ExchangeRatio], None]


def normalize_pair(pair: str) -> str:
    return pair.strip().upper()


class RatioCache:
    """Last known ratio per pair, refreshed by a background task.

    Reads never block on the source. A failed refresh keeps the previous value;
    a value older than `stale_tolerance_ms` is refused instead of served.
    """

    def __init__(
        self,
        source: RatioSourcePort,
        *,
        pairs: Iterable[str],
        refresh_interval_ms: int,
        stale_tolerance_ms: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        if refresh_interval_ms <= 0:
            raise ValueError("refresh_interval_ms must be positive.")
        if stale_tolerance_ms <= 0:
            raise ValueError("stale_tolerance_ms must be positive.")
        self._source = source
        self._pairs = tuple(dict.fromkeys(normalize_pair(pair) for pair in pairs))
        self._refresh_interval_ms = refresh_interval_ms
        self._stale_tolerance_ms = stale_tolerance_ms
        self._clock = clock
        self._entries: dict[str, tuple[float, ExchangeRatio]] = {}
        self._subscribers: list[RatioCallback] = []
        self._task: asyncio.Task | None = None

    @property
    def pairs(self) -> tuple[str, ...]:
        return self._pairs

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            return
        await self.refresh_all()
        self._task = asyncio.create_task(self._run(), name="ratio-cache-refresh")
        logger.info(
            "ratio_cache: started pairs=%s refresh_interval_ms=%s stale_tolerance_ms=%s",
            ",".join(self._pairs),
            self._refresh_interval_ms,
            self._stale_tolerance_ms,
        )

    async def close(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("ratio_cache: stopped")

    async def __aenter__(self) -> RatioCache:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _run(self) -> None:
        interval = self._refresh_interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            try:
                await self.refresh_all()
            except Exception:  # noqa: BLE001
                logger.exception("ratio_cache: refresh_loop_error")

    async def refresh_all(self) -> None:
        for pair in self._pairs:
            await self.refresh(pair)

    async def refresh(self, pair: str) -> bool:
        pair = normalize_pair(pair)
        try:
            ratio = await self._source.fetch_ratio(pair=pair)
            validate_ratio(ratio)
        except DomainError as exc:
            logger.warning(
                "ratio_cache: refresh_failed pair=%s keeping_previous=%s error=%s",
                pair,
                pair in self._entries,
                exc,
            )
            return False

        self._entries[pair] = (self._clock(), ratio)
        logger.debug(
            "ratio_cache: refreshed pair=%s numerator=%s denominator=%s",
            pair,
            ratio.numerator,
            ratio.denominator,
        )
        self._notify(pair, ratio)
        return True

    async def fetch_ratio(self, *, pair: str) -> ExchangeRatio:
        pair = normalize_pair(pair)
        entry = self._entries.get(pair)
        if entry is None:
            raise RatioUnavailableError(f"No ratio available for {pair}.")
        fetched_at, ratio = entry
        age_ms = (self._clock() - fetched_at) * 1000
        if age_ms > self._stale_tolerance_ms:
            raise RatioUnavailableError(
                f"Ratio for {pair} is stale ({age_ms:.0f} ms old, tolerance {self._stale_tolerance_ms} ms)."
            )
        return ratio

    def subscribe(self, callback: RatioCallback) -> Callable[[], None]:
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: RatioCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, pair: str, ratio: ExchangeRatio) -> None:
        for callback in list(self._subscribers):
            try:
                callback(pair, ratio)
            except Exception:  # noqa: BLE001
                logger.exception("ratio_cache: subscriber_failed pair=%s", pair)
