"""
Ingress Analyzer for Kubernetes Diagnostics

Checks that every ingress names an ingress class that exists, and that the
backend services and TLS secrets it references are present.
"""

from typing import Any, List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Failure, Result

INGRESS_CLASS_ANNOTATION = "kubernetes.io/ingress.class"


class IngressAnalyzer(BaseAnalyzer):
    """Analyzes ingress class, backend and TLS references"""

    name = "Ingress"
    doc_reference = "https://kubernetes.io/docs/concepts/services-networking/ingress/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for ingress in context.client.list_ingresses(context.namespace):
            failures = self._check_class(context, ingress)
            failures.extend(self._check_backends(context, ingress))
            failures.extend(self._check_tls(context, ingress))
            if failures:
                results.append(self.make_result(self.object_key(ingress), failures))
        return results

    def _check_class(self, context: AnalyzerContext, ingress: Any) -> List[Failure]:
        metadata = ingress.metadata
        class_name = ingress.spec.ingress_class_name if ingress.spec else None
        if not class_name:
            class_name = (metadata.annotations or {}).get(INGRESS_CLASS_ANNOTATION)

        if not class_name:
            text = f"Ingress {metadata.namespace}/{metadata.name} does not specify an Ingress class."
            return [self.make_failure(context, text, [metadata.namespace, metadata.name])]

        if context.client.get_ingress_class(class_name) is None:
            text = f"Ingress uses the ingress class {class_name} which does not exist."
            return [self.make_failure(context, text, [class_name])]
        return []

    def _check_backends(self, context: AnalyzerContext, ingress: Any) -> List[Failure]:
        namespace = ingress.metadata.namespace
        failures = []
        checked = set()
        for rule in (ingress.spec.rules if ingress.spec else None) or []:
            if not rule.http:
                continue
            for path in rule.http.paths or []:
                service = path.backend.service if path.backend else None
                if not service or service.name in checked:
                    continue
                checked.add(service.name)
                if context.client.get_service(namespace, service.name) is None:
                    text = f"Ingress uses the service {namespace}/{service.name} which does not exist."
                    failures.append(self.make_failure(context, text, [namespace, service.name]))
        return failures

    def _check_tls(self, context: AnalyzerContext, ingress: Any) -> List[Failure]:
        namespace = ingress.metadata.namespace
        failures = []
        for tls in (ingress.spec.tls if ingress.spec else None) or []:
            if not tls.secret_name:
                continue
            if context.client.get_secret(namespace, tls.secret_name) is None:
                text = (
                    f"Ingress uses the secret {namespace}/{tls.secret_name} "
                    "as a TLS certificate which does not exist."
                )
                failures.append(self.make_failure(context, text, [namespace, tls.secret_name]))
        return failures
