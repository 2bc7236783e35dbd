"""Concurrent checker execution with fail-open error handling."""

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Iterable, Optional

from auditkit.checks.base import Checker
from auditkit.context import ScanContext
from auditkit.errors import CheckerTimeoutError, ScanCancelledError
from auditkit.models import CheckerFailure, CheckResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
DEFAULT_CHECKER_TIMEOUT = 300.0


@dataclass
class RunOutcome:
    """Everything a run produced.

    Attributes:
        results: Check results in checker registration order.
        failures: One entry per checker that produced nothing usable.
        attempted: Number of checkers the runner started with.
        cancelled: True if the scan was cancelled and the caller accepted
            partial output.
    """

    results: list[CheckResult] = field(default_factory=list)
    failures: list[CheckerFailure] = field(default_factory=list)
    attempted: int = 0
    cancelled: bool = False

    @property
    def succeeded(self) -> int:
        """Number of checkers that returned results."""
        return self.attempted - len(self.failures)


class CheckerRunner:
    """Runs checkers on a bounded thread pool.

    A checker that raises, or that does not finish before its deadline, is
    recorded as a failure and contributes no results. The scan continues
    with the remaining checkers.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        checker_timeout: Optional[float] = DEFAULT_CHECKER_TIMEOUT,
        poll_interval: float = 0.1,
    ) -> None:
        """Initialize the runner.

        Args:
            max_workers: Maximum checkers running at once.
            checker_timeout: Seconds each checker may run (None = unbounded).
            poll_interval: Seconds between deadline and cancellation checks.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self.checker_timeout = checker_timeout
        self.poll_interval = poll_interval

    def run(
        self,
        checkers: Iterable[Checker],
        context: Optional[ScanContext] = None,
        allow_partial: bool = False,
    ) -> RunOutcome:
        """Run every checker and gather their results.

        Args:
            checkers: Checkers to run. Order determines result order.
            context: Scan-wide context; cancelling it stops the scan.
            allow_partial: Return what finished instead of raising when the
                scan is cancelled.

        Returns:
            RunOutcome with results, failures and coverage counts.

        Raises:
            ScanCancelledError: If the scan was cancelled and
                ``allow_partial`` is False.
        """
        checkers = list(checkers)
        context = context or ScanContext()

        if context.done and not allow_partial:
            context.raise_if_cancelled()

        # Parent of every checker context; cancelled when the run ends
        run_scope = context.child()
        slots: list[Optional[list[CheckResult]]] = [None] * len(checkers)
        failures: dict[int, CheckerFailure] = {}
        children: dict[int, ScanContext] = {}
        lock = threading.Lock()
        cancelled = False

        def invoke(index: int, checker: Checker) -> list[CheckResult]:
            # Deadline starts when a worker picks the checker up, not at submit
            child = run_scope.child(timeout=self.checker_timeout)
            with lock:
                children[index] = child
            logger.info(f"Running checker: {checker.name}")
            started = time.monotonic()
            results = list(checker.run(child))
            logger.info(
                f"Checker {checker.name} returned {len(results)} results "
                f"in {time.monotonic() - started:.2f}s"
            )
            return results

        executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="auditkit-checker"
        )
        try:
            futures: dict[Future, int] = {
                executor.submit(invoke, index, checker): index
                for index, checker in enumerate(checkers)
            }
            pending = set(futures)

            while pending:
                done, pending = wait(
                    pending, timeout=self.poll_interval, return_when=FIRST_COMPLETED
                )
                for future in done:
                    index = futures[future]
                    with lock:
                        child = children.get(index)
                    self._collect(future, checkers[index], child, index, slots, failures)

                if context.done:
                    cancelled = True
                    for future in pending:
                        index = futures[future]
                        failures[index] = CheckerFailure.from_exception(
                            checkers[index].name,
                            ScanCancelledError("Scan cancelled before checker finished"),
                        )
                    break

                for future in list(pending):
                    if future.done():
                        continue
                    index = futures[future]
                    with lock:
                        child = children.get(index)
                    if child is not None and child.expired:
                        child.cancel()
                        pending.discard(future)
                        failures[index] = self._timeout_failure(checkers[index])
        finally:
            # Checkers still running stop at their next context poll; do not
            # block on them.
            run_scope.cancel()
            executor.shutdown(wait=False, cancel_futures=True)

        if cancelled and not allow_partial:
            logger.warning("Scan cancelled; discarding partial results")
            raise ScanCancelledError("Scan cancelled")

        outcome = RunOutcome(
            results=[r for slot in slots if slot for r in slot],
            failures=[failures[i] for i in sorted(failures)],
            attempted=len(checkers),
            cancelled=cancelled,
        )
        logger.info(
            f"Run complete: {outcome.succeeded}/{outcome.attempted} checkers succeeded, "
            f"{len(outcome.results)} results"
        )
        return outcome

    def _collect(
        self,
        future: Future,
        checker: Checker,
        child: Optional[ScanContext],
        index: int,
        slots: list[Optional[list[CheckResult]]],
        failures: dict[int, CheckerFailure],
    ) -> None:
        """Store a finished checker's results or record its failure."""
        try:
            slots[index] = future.result()
        except ScanCancelledError as e:
            if child is not None and child.expired and not child.cancelled:
                failures[index] = self._timeout_failure(checker)
            else:
                failures[index] = CheckerFailure.from_exception(checker.name, e)
                logger.warning(f"Checker {checker.name} cancelled: {e}")
        except Exception as e:
            failures[index] = CheckerFailure.from_exception(checker.name, e)
            logger.warning(f"Checker {checker.name} failed: {type(e).__name__} - {e}")

    def _timeout_failure(self, checker: Checker) -> CheckerFailure:
        error = CheckerTimeoutError(
            checker.name,
            f"{checker.name} did not finish within {self.checker_timeout}s",
        )
        logger.warning(f"Checker {checker.name} timed out after {self.checker_timeout}s")
        return CheckerFailure.from_exception(checker.name, error)
