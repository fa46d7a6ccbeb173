"""
Base class for analyzers
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from .models import Failure, Result, Sensitive


@dataclass
class AnalyzerContext:
    """Everything an analyzer needs to inspect the cluster"""

    client: Any
    namespace: str = ""
    cancel_event: threading.Event = field(default_factory=threading.Event)
    with_doc: bool = False

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()


class BaseAnalyzer(ABC):
    """
    Base class for all analyzers

    Subclasses set ``name`` to the resource kind they inspect and ``core`` to
    False when they should only run when explicitly selected. Analyzers keep
    no per-run state so one instance can be shared between concurrent runs.
    """

    name: str = ""
    core: bool = True
    doc_reference: str = ""

    def __init__(self):
        """Initialize analyzer"""
        self.logger = logging.getLogger(f"kube_diagnostics.{self.__class__.__name__}")

    @property
    def display_name(self) -> str:
        return f"{self.name}Analyzer"

    @abstractmethod
    def analyze(self, context: AnalyzerContext) -> List[Result]:
        """
        Perform analysis

        Args:
            context: Cluster client, target namespace and cancellation flag

        Returns:
            One Result per object with at least one failure
        """

    def make_failure(
        self,
        context: AnalyzerContext,
        text: str,
        sensitive_values: Iterable[str] = (),
        doc: Optional[str] = None,
    ) -> Failure:
        """
        Build a failure, recording the values that must not leave the cluster

        Args:
            context: Analyzer context (decides whether docs are attached)
            text: Human readable description
            sensitive_values: Substrings of text to mask before AI calls
            doc: Documentation reference, defaults to the analyzer's
        """
        sensitive = []
        for value in sensitive_values:
            if value and value in text and all(s.unmasked != value for s in sensitive):
                sensitive.append(Sensitive(unmasked=value))

        kubernetes_doc = ""
        if context.with_doc:
            kubernetes_doc = doc if doc is not None else self.doc_reference

        return Failure(text=text, kubernetes_doc=kubernetes_doc, sensitive=sensitive)

    def make_result(self, name: str, failures: List[Failure], parent_object: str = "") -> Result:
        """Build a result for this analyzer's kind and log its failures"""
        for failure in failures:
            self.logger.debug(f"Finding: [!] {self.name} {name}: {failure.text}")
        return Result(kind=self.name, name=name, error=failures, parent_object=parent_object)

    @staticmethod
    def object_key(obj: Any) -> str:
        """Return namespace/name for a Kubernetes object"""
        return f"{obj.metadata.namespace}/{obj.metadata.name}"
