"""
AI enrichment of analysis results

For every result with failures the pipeline masks the sensitive values the
analyzers recorded, builds a prompt, serves it from the cache or asks the
backend, and attaches the explanation to the result. Explanations are
unmasked again unless the run asks for anonymized output.

A backend failure only affects its own result. The pipeline raises
EnrichmentError when no explanation at all could be produced.
"""

import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from .ai_backends import AIBackend
from .cache import CacheManager
from .config import DEFAULT_LANGUAGE
from .exceptions import EnrichmentError
from .models import Result, Sensitive
from .prompts import get_prompt_template
from .sensitizer import Sensitizer

if TYPE_CHECKING:
    from .analysis import AnalysisRun


class EnrichmentPipeline:
    """Attaches AI explanations to the results of a run"""

    def __init__(
        self,
        backend: AIBackend,
        cache: Optional[CacheManager] = None,
        sensitizer: Optional[Sensitizer] = None,
        verbose: bool = False,
    ):
        """
        Initialize pipeline

        Args:
            backend: AI backend used on cache misses
            cache: Explanation cache (a memory-only cache when omitted)
            sensitizer: Masking component shared with the run
            verbose: Emit traces before backend calls
        """
        self.backend = backend
        self.cache = cache if cache is not None else CacheManager()
        self.sensitizer = sensitizer or Sensitizer()
        self.verbose = verbose
        self.logger = logging.getLogger("kube_diagnostics.enrichment")

    def _trace(self, message: str):
        if self.verbose:
            self.logger.debug(message)

    def enrich(self, run: "AnalysisRun") -> int:
        """
        Explain every result of a run that has failures

        Args:
            run: AnalysisRun whose results are annotated in place

        Returns:
            Number of results that received an explanation

        Raises:
            EnrichmentError: If every attempted explanation failed
        """
        if not run.results:
            return 0

        run.provider = self.backend.name
        language = run.language or DEFAULT_LANGUAGE
        attempted = 0
        enriched = 0
        last_error = None

        for result in run.results:
            if not result.error:
                continue

            attempted += 1
            try:
                result.details = self.explain(result, language, run.anonymize)
                enriched += 1
            except Exception as e:
                last_error = e
                self.logger.warning(f"AI analysis failed for {result.kind} {result.name}: {e}")

        if attempted and not enriched:
            raise EnrichmentError(f"AI analysis failed for all {attempted} result(s): {last_error}") from last_error

        return enriched

    def sanitize_result(self, result: Result) -> Tuple[str, List[Sensitive]]:
        """
        Mask the failure texts of a result

        Also fills in the masked side of every Sensitive entry the analyzers
        recorded, so the report shows which placeholder stood for what.

        Returns:
            Tuple of joined masked text and the substitutions made
        """
        texts = [failure.text for failure in result.error]
        masked_text, substitutions = self.sensitizer.sanitize(" ".join(texts), result.sensitive_values())

        for failure in result.error:
            for sensitive in failure.sensitive:
                sensitive.masked = self.sensitizer.placeholder(sensitive.unmasked)

        return masked_text, substitutions

    def explain(self, result: Result, language: str = DEFAULT_LANGUAGE, anonymize: bool = False) -> str:
        """
        Produce the explanation for one result

        Args:
            result: Result with at least one failure
            language: Language the explanation is requested in
            anonymize: Leave placeholders in the explanation

        Returns:
            Explanation text
        """
        masked_text, substitutions = self.sanitize_result(result)

        template = self.backend.prompt_template or get_prompt_template(result.kind)
        response = self.get_ai_result_for_sanitized_failures([masked_text], template, language)

        if anonymize:
            return response
        return self.sensitizer.restore(response, substitutions)

    def get_ai_result_for_sanitized_failures(
        self, texts: List[str], template: str, language: str = DEFAULT_LANGUAGE
    ) -> str:
        """
        Resolve already-sanitized failure texts to an explanation

        Args:
            texts: Sanitized failure texts
            template: Prompt template with {language} and {error} placeholders
            language: Language the explanation is requested in

        Returns:
            Raw backend response, possibly served from the cache
        """
        prompt = template.format(language=language, error=" ".join(texts))
        key = CacheManager.make_key(self.backend.name, prompt)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        self._trace("Generating AI analysis.")
        response = self.backend.get_completion(prompt)
        self.cache.put(key, response)
        return response
