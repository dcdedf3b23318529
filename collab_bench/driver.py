# =============================================================================
# collab-bench -- Load Driver
# =============================================================================
#
# Fans out one task per simulated client, waits for all of them and
# tallies how many completed the script.
# =============================================================================

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Callable

from ._logging import logger
from .client import SimulatedClient
from .counter import SuccessCounter
from .types import BenchConfig, ClientResult, RunReport


class LoadDriver:
    """Orchestrates ``config.client_count`` clients against one endpoint.

    With ``config.max_concurrency`` unset every client is launched at
    once. Otherwise a semaphore admits at most that many clients at a
    time; the rest wait for a slot before connecting.

    Args:
        config: Run configuration.
        counter: Success counter shared by all clients. A fresh one is
            created when omitted.
        connect: Forwarded to each :class:`SimulatedClient`.
    """

    def __init__(
        self,
        config: BenchConfig,
        *,
        counter: SuccessCounter | None = None,
        connect: Callable[..., Any] | None = None,
    ) -> None:
        self._config = config
        self._counter = counter if counter is not None else SuccessCounter()
        self._connect = connect

    @property
    def counter(self) -> SuccessCounter:
        return self._counter

    def _make_client(self, index: int) -> SimulatedClient:
        return SimulatedClient(index, self._config, self._counter, connect=self._connect)

    async def _run_one(
        self, client: SimulatedClient, slots: asyncio.Semaphore | None
    ) -> ClientResult:
        guard = slots if slots is not None else contextlib.nullcontext()
        async with guard:
            return await client.run()

    async def run(self) -> RunReport:
        cfg = self._config
        logger.info("Connection string: %s", cfg.url)

        slots = (
            asyncio.Semaphore(cfg.max_concurrency)
            if cfg.max_concurrency is not None
            else None
        )
        tasks = [
            asyncio.create_task(self._run_one(self._make_client(i), slots))
            for i in range(cfg.client_count)
        ]
        results = list(await asyncio.gather(*tasks))

        report = RunReport(
            client_count=cfg.client_count,
            successes=self._counter.value,
            results=results,
        )
        stats = report.get_stats()
        logger.info(
            "Run stats: %d changes sent, %d frames received, failures by stage: %s",
            stats["changes_sent"],
            stats["frames_received"],
            stats["failures_by_stage"] or "none",
        )
        return report


async def run_benchmark(
    config: BenchConfig,
    *,
    connect: Callable[..., Any] | None = None,
) -> RunReport:
    """Run one benchmark with a fresh counter and return its report."""
    return await LoadDriver(config, connect=connect).run()
