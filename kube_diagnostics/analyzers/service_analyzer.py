"""
Service Analyzer for Kubernetes Diagnostics

Works from Endpoints objects: an Endpoints object without subsets means the
Service's selector matches no ready pod, and not-ready addresses point at
pods failing their readiness checks. Endpoints objects on their own are
never reported.
"""

from typing import Any, List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Result

LEADER_ELECTION_ANNOTATION = "control-plane.alpha.kubernetes.io/leader"


class ServiceAnalyzer(BaseAnalyzer):
    """Analyzes services whose selectors resolve to no usable endpoints"""

    name = "Service"
    doc_reference = "https://kubernetes.io/docs/concepts/services-networking/service/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for endpoints in context.client.list_endpoints(context.namespace):
            metadata = endpoints.metadata
            failures = []

            if not endpoints.subsets:
                if LEADER_ELECTION_ANNOTATION in (metadata.annotations or {}):
                    continue

                service = context.client.get_service(metadata.namespace, metadata.name)
                if service is None:
                    self.logger.debug(f"Service {metadata.namespace}/{metadata.name} does not exist")
                    continue

                selector = (service.spec.selector if service.spec else None) or {}
                for key, value in selector.items():
                    text = f"Service has no endpoints, expected label {key}={value}"
                    failures.append(self.make_failure(context, text, [key, value]))
            else:
                pods = self._not_ready_pods(endpoints)
                if pods:
                    text = f"Service has not ready endpoints, pods: {', '.join(pods)}, expected {len(pods)}"
                    failures.append(self.make_failure(context, text, pods))

            if failures:
                results.append(self.make_result(self.object_key(endpoints), failures))
        return results

    @staticmethod
    def _not_ready_pods(endpoints: Any) -> List[str]:
        pods = []
        for subset in endpoints.subsets or []:
            for address in subset.not_ready_addresses or []:
                ref = address.target_ref
                pods.append(f"{ref.kind}/{ref.name}" if ref else address.ip)
        return pods
