"""
Bounded execution of analyzers

Analyzers run at most ``max_concurrency`` at a time. Each run is isolated:
an exception from one analyzer is recorded as an error string and the
others carry on. Results are collected under a lock, so their order
follows completion order rather than selection order.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .base_analyzer import AnalyzerContext, BaseAnalyzer
from .models import Result


@dataclass
class ExecutionOutcome:
    """Everything collected from one execution"""

    results: List[Result] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class AnalyzerExecutor:
    """Runs analyzers on a fixed-size worker pool"""

    def __init__(self, verbose: bool = False, logger: Optional[logging.Logger] = None):
        self.verbose = verbose
        self.logger = logger or logging.getLogger("kube_diagnostics.executor")
        self._lock = threading.Lock()

    def _trace(self, message: str):
        if self.verbose:
            self.logger.debug(message)

    def execute(
        self, analyzers: Sequence[BaseAnalyzer], context: AnalyzerContext, max_concurrency: int = 1
    ) -> ExecutionOutcome:
        """
        Run each analyzer exactly once

        Args:
            analyzers: Selected analyzers
            context: Shared analyzer context
            max_concurrency: Worker pool size; 1 or less runs sequentially

        Returns:
            ExecutionOutcome with results and per-analyzer errors
        """
        outcome = ExecutionOutcome()
        if not analyzers:
            return outcome

        if max_concurrency <= 1:
            for analyzer in analyzers:
                self._run_one(analyzer, context, outcome)
            return outcome

        workers = min(max_concurrency, len(analyzers))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="analyzer") as pool:
            futures = {pool.submit(self._run_one, analyzer, context, outcome): analyzer for analyzer in analyzers}
            for future in as_completed(futures):
                # _run_one handles analyzer exceptions, anything left is a bug worth surfacing
                future.result()

        return outcome

    def _run_one(self, analyzer: BaseAnalyzer, context: AnalyzerContext, outcome: ExecutionOutcome):
        """Run a single analyzer and merge what it produced into the outcome"""
        name = analyzer.display_name
        if context.cancelled:
            self._trace(f"{name} skipped (run cancelled).")
            with self._lock:
                outcome.skipped.append(analyzer.name)
            return

        self._trace(f"{name} launched.")
        try:
            results = analyzer.analyze(context)
        except Exception as e:
            self._trace(f"{name} completed with errors: {e}")
            with self._lock:
                outcome.errors.append(f"[{name}] {e}")
            return

        self._trace(f"{name} completed without errors.")
        with self._lock:
            outcome.results.extend(results or [])
            outcome.completed.append(analyzer.name)
