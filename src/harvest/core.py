"""Harvest orchestrator."""

from __future__ import annotations

import logging
import time
from collections import Counter
from concurrent.futures import (
    ALL_COMPLETED,
    FIRST_COMPLETED,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from pathlib import Path
from typing import Optional, Set

from .config import HarvestConfig
from .errors import HarvestTimeoutError, TraversalEntryError
from .models import HarvestResult, MetadataRecord
from .scanner import iter_candidate_files
from .worker import FileOutcome, extract_file


logger = logging.getLogger(__name__)


class _Collector:
    """Fan-in side of the run. Only touched from the orchestrating thread."""

    def __init__(self) -> None:
        self.records: Set[MetadataRecord] = set()
        self.failures: Counter = Counter()
        self.traversal_errors = 0

    def merge(self, outcome: FileOutcome) -> None:
        if outcome.record is not None:
            self.records.add(outcome.record)
        elif outcome.failure is not None:
            self.failures[outcome.failure.kind] += 1

    def record_traversal_error(self, error: TraversalEntryError) -> None:
        self.traversal_errors += 1
        logger.debug("failed to enumerate entry: %s", error)


def _executor_for(config: HarvestConfig) -> Executor:
    if config.use_process_pool:
        return ProcessPoolExecutor(max_workers=config.max_workers)
    return ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="harvest")


def _abandon(executor: Executor) -> None:
    """Stop accepting work without waiting for units that are still running.

    Worker processes are terminated. Worker threads cannot be killed, so a
    caller that must not wait for them has to end the interpreter itself.
    """

    processes = []
    if isinstance(executor, ProcessPoolExecutor):
        # shutdown() drops the process table, so grab it first
        processes = list((getattr(executor, "_processes", None) or {}).values())
    executor.shutdown(wait=False, cancel_futures=True)
    for process in processes:
        if process.is_alive():
            process.terminate()


def _drain(
    pending: Set[Future],
    collector: _Collector,
    *,
    return_when: str,
    deadline: Optional[float],
    timeout_seconds: Optional[float],
) -> Set[Future]:
    timeout = None if deadline is None else max(0.0, deadline - time.perf_counter())
    done, not_done = wait(pending, timeout=timeout, return_when=return_when)
    for future in done:
        collector.merge(future.result())
    timed_out = not done if return_when == FIRST_COMPLETED else bool(not_done)
    if timed_out and not_done:
        raise HarvestTimeoutError(timeout_seconds or 0.0, len(not_done))
    return set(not_done)


def run_harvest(config: HarvestConfig) -> HarvestResult:
    """Decode every regular file under ``config.input_root`` and collect the records.

    Files are fanned out to a pool while the tree is still being walked; at
    most ``resolved_max_in_flight()`` files are outstanding at once. Records
    are merged on this thread as futures complete, so the returned set is
    complete once the last future has been merged. Only fatal errors raise.
    """

    limit = config.resolved_max_in_flight()
    start = time.perf_counter()
    deadline = start + config.timeout_seconds if config.timeout_seconds else None
    collector = _Collector()
    files_discovered = 0

    candidates = iter_candidate_files(
        config.input_root,
        follow_symlinks=config.follow_symlinks,
        max_scan_workers=config.scan_workers,
        on_error=collector.record_traversal_error,
    )
    executor = _executor_for(config)
    pending: Set[Future] = set()
    try:
        for path in candidates:
            files_discovered += 1
            if len(pending) >= limit:
                pending = _drain(
                    pending,
                    collector,
                    return_when=FIRST_COMPLETED,
                    deadline=deadline,
                    timeout_seconds=config.timeout_seconds,
                )
            pending.add(executor.submit(extract_file, path, config.decode_mode))
        _drain(
            pending,
            collector,
            return_when=ALL_COMPLETED,
            deadline=deadline,
            timeout_seconds=config.timeout_seconds,
        )
    except BaseException:
        candidates.close()
        _abandon(executor)
        raise
    executor.shutdown(wait=True)

    return HarvestResult(
        records=frozenset(collector.records),
        files_discovered=files_discovered,
        traversal_errors=collector.traversal_errors,
        failures=collector.failures,
        elapsed_seconds=time.perf_counter() - start,
    )


def harvest(root: Path, **options) -> HarvestResult:
    """Shortcut for :func:`run_harvest` with keyword overrides of :class:`HarvestConfig`."""

    return run_harvest(HarvestConfig(input_root=Path(root), **options))
