"""Batch runner: many independent distribution requests against one snapshot."""

import logging
import threading
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

from config.defaults import BATCH_PROGRESS_EVERY, DEFAULT_MAX_WORKERS
from engine.errors import CodecError, InvalidInputError, InvariantViolation, NoMatchError
from engine.strategies import plan_distribution
from models.catalog import CatalogSnapshot
from models.outcome import DistributionOutcome, OutcomeStatus
from models.request import DistributionRequest

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def run_one(
    request: DistributionRequest,
    snapshot: CatalogSnapshot,
    rule_config: Optional[dict] = None,
) -> DistributionOutcome:
    """Plan one request and map its error kind to an outcome status."""
    code = request.product_code
    try:
        plan = plan_distribution(request, snapshot, rule_config)
    except NoMatchError as exc:
        logger.info("%s skipped: %s", code, exc)
        return DistributionOutcome(code, OutcomeStatus.SKIPPED, message=str(exc))
    except (InvalidInputError, CodecError) as exc:
        logger.warning("%s invalid: %s", code, exc)
        return DistributionOutcome(code, OutcomeStatus.INVALID, message=str(exc))
    except InvariantViolation:
        logger.exception("%s broke an allocation invariant", code)
        raise
    except Exception as exc:
        logger.exception("%s failed unexpectedly", code)
        return DistributionOutcome(code, OutcomeStatus.FAILED, message=f"{type(exc).__name__}: {exc}")
    return DistributionOutcome(code, OutcomeStatus.OK, plan=plan)


def _cancelled(request: DistributionRequest) -> DistributionOutcome:
    return DistributionOutcome(request.product_code, OutcomeStatus.CANCELLED, message="Batch cancelled")


def _guarded(request, snapshot, rule_config, cancel_event):
    # thread workers re-check the flag when they actually start
    if cancel_event is not None and cancel_event.is_set():
        return _cancelled(request)
    return run_one(request, snapshot, rule_config)


def _report(progress_callback: Optional[ProgressCallback], done: int, total: int):
    if progress_callback is not None and (done % BATCH_PROGRESS_EVERY == 0 or done == total):
        progress_callback(done, total)


def _run_sequential(requests, snapshot, rule_config, cancel_event, progress_callback):
    outcomes = []
    for request in requests:
        if cancel_event is not None and cancel_event.is_set():
            outcomes.append(_cancelled(request))
        else:
            outcomes.append(run_one(request, snapshot, rule_config))
        _report(progress_callback, len(outcomes), len(requests))
    return outcomes


def _run_pooled(executor: Executor, requests, snapshot, rule_config, cancel_event,
                progress_callback, use_process_pool: bool):
    outcomes: List[Optional[DistributionOutcome]] = [None] * len(requests)
    futures = {}
    for i, request in enumerate(requests):
        if use_process_pool:
            future = executor.submit(run_one, request, snapshot, rule_config)
        else:
            future = executor.submit(_guarded, request, snapshot, rule_config, cancel_event)
        futures[future] = i

    done = 0
    for future in as_completed(futures):
        i = futures[future]
        if future.cancelled():
            outcomes[i] = _cancelled(requests[i])
        else:
            try:
                outcomes[i] = future.result()
            except InvariantViolation:
                for pending in futures:
                    pending.cancel()
                raise
        done += 1
        _report(progress_callback, done, len(requests))
        if cancel_event is not None and cancel_event.is_set():
            for pending in futures:
                pending.cancel()
    return outcomes


def run_batch(
    requests: Sequence[DistributionRequest],
    snapshot: CatalogSnapshot,
    *,
    rule_config: Optional[dict] = None,
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
    use_process_pool: bool = False,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> List[DistributionOutcome]:
    """Plan every request independently; outcomes come back in request order.

    Sequential when max_workers is None or 1, otherwise on a thread pool (or
    a process pool when asked). Once cancel_event is set, requests that have
    not started finish as cancelled.
    """
    requests = list(requests)
    if not requests:
        return []

    logger.info("Running batch of %d request(s), max_workers=%s", len(requests), max_workers)
    if max_workers is None or max_workers <= 1:
        outcomes = _run_sequential(requests, snapshot, rule_config, cancel_event, progress_callback)
    else:
        pool_cls = ProcessPoolExecutor if use_process_pool else ThreadPoolExecutor
        with pool_cls(max_workers=max_workers) as executor:
            outcomes = _run_pooled(
                executor, requests, snapshot, rule_config, cancel_event,
                progress_callback, use_process_pool,
            )

    counts = {}
    for outcome in outcomes:
        counts[outcome.status.value] = counts.get(outcome.status.value, 0) + 1
    logger.info("Batch finished: %s", counts)
    return outcomes
