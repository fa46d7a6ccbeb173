"""
One diagnosis run, end to end

Analysis wires the components together in the order the data flows:
registry selection, bounded execution, optional AI enrichment and report
rendering. Every component receives the same immutable AnalysisConfig.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from .ai_backends import AIBackend
from .analyzer_registry import AnalyzerRegistry
from .base_analyzer import AnalyzerContext
from .cache import CacheManager
from .config import DEFAULT_LANGUAGE, AnalysisConfig
from .custom_analyzer import load_custom_analyzers
from .enrichment import EnrichmentPipeline
from .exceptions import InvalidConfigurationError
from .executor import AnalyzerExecutor
from .models import Result
from .report_generator import ReportGenerator
from .sensitizer import Sensitizer


@dataclass
class AnalysisRun:
    """State of a single invocation"""

    namespace: str = ""
    filters: List[str] = field(default_factory=list)
    active_filters: List[str] = field(default_factory=list)
    max_concurrency: int = 1
    language: str = DEFAULT_LANGUAGE
    anonymize: bool = False
    with_doc: bool = False
    results: List[Result] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    provider: Optional[str] = None

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "AnalysisRun":
        return cls(
            namespace=config.namespace,
            filters=list(config.filters),
            active_filters=list(config.active_filters),
            max_concurrency=config.max_concurrency,
            language=config.language,
            anonymize=config.anonymize,
            with_doc=config.with_doc,
        )


class Analysis:
    """Main class for Kubernetes diagnostics"""

    def __init__(
        self,
        config: AnalysisConfig,
        client,
        registry: Optional[AnalyzerRegistry] = None,
        backend: Optional[AIBackend] = None,
        cache: Optional[CacheManager] = None,
        sensitizer: Optional[Sensitizer] = None,
    ):
        """
        Initialize analysis

        Args:
            config: Configuration snapshot
            client: KubernetesClient (or any object with the same list helpers)
            registry: Analyzer registry, the built-in set when omitted
            backend: AI backend, required only for get_ai_results()
            cache: Explanation cache
            sensitizer: Masking component. Built on first enrichment when omitted, salted from
                the cache directory so persisted explanations are reused across runs
        """
        self.config = config
        self.client = client
        self.run = AnalysisRun.from_config(config)
        self.logger = logging.getLogger("kube_diagnostics.analysis")
        self.cancel_event = threading.Event()

        self.registry = registry or AnalyzerRegistry(verbose=config.verbose)
        for analyzer in load_custom_analyzers(config.custom_analyzers):
            self.registry.register_custom(analyzer)

        self.executor = AnalyzerExecutor(verbose=config.verbose)
        self.backend = backend
        self.cache = cache
        self.sensitizer = sensitizer

    @property
    def results(self) -> List[Result]:
        return self.run.results

    def cancel(self):
        """Stop launching analyzers; running ones finish"""
        self.cancel_event.set()

    def run_analysis(self) -> List[Result]:
        """
        Select and execute the analyzers for this run

        Returns:
            The run's accumulated results
        """
        custom_names = [entry["name"] for entry in self.config.custom_analyzers]
        analyzers = self.registry.select_analyzers(self.run.filters, self.run.active_filters, custom_names)

        context = AnalyzerContext(
            client=self.client,
            namespace=self.run.namespace,
            cancel_event=self.cancel_event,
            with_doc=self.run.with_doc,
        )
        outcome = self.executor.execute(analyzers, context, self.run.max_concurrency)

        self.run.results.extend(outcome.results)
        self.run.errors.extend(outcome.errors)
        if outcome.errors:
            self.logger.debug(f"{len(outcome.errors)} analyzer(s) failed")
        return self.run.results

    def get_ai_results(self) -> int:
        """
        Attach AI explanations to the results

        Returns:
            Number of results explained

        Raises:
            InvalidConfigurationError: If no backend was configured
            EnrichmentError: If no explanation could be produced
        """
        if not self.run.results:
            return 0
        if self.backend is None:
            raise InvalidConfigurationError("An AI backend is required to explain results")

        cache = self.cache
        if cache is None:
            cache = CacheManager(cache_dir=self.config.cache_dir, enabled=self.config.cache_enabled)
            self.cache = cache
        if self.sensitizer is None:
            self.sensitizer = Sensitizer(salt=cache.load_salt())

        pipeline = EnrichmentPipeline(self.backend, cache, self.sensitizer, verbose=self.config.verbose)
        return pipeline.enrich(self.run)

    def print_output(self, mode: str = "text") -> bytes:
        """Render the run as a report"""
        return ReportGenerator.from_run(self.run).generate(mode)
