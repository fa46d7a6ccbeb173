"""
NetworkPolicy Analyzer for Kubernetes Diagnostics
"""

from typing import Any, Dict, List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Result


class NetworkPolicyAnalyzer(BaseAnalyzer):
    """Flags policies that select every pod or no pod at all"""

    name = "NetworkPolicy"
    core = False
    doc_reference = "https://kubernetes.io/docs/concepts/services-networking/network-policies/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        policies = context.client.list_network_policies(context.namespace)
        if not policies:
            return []

        pods = context.client.list_pods(context.namespace)
        results = []
        for policy in policies:
            metadata = policy.metadata
            selector = policy.spec.pod_selector if policy.spec else None
            match_labels = (selector.match_labels if selector else None) or {}
            match_expressions = (selector.match_expressions if selector else None) or []

            failures = []
            if not match_labels and not match_expressions:
                text = f"Network policy allows traffic to all pods: {metadata.name}"
                failures.append(self.make_failure(context, text, [metadata.name]))
            elif not match_expressions and not self._selects_any(pods, metadata.namespace, match_labels):
                text = f"Network policy is not applied to any pods: {metadata.name}"
                failures.append(self.make_failure(context, text, [metadata.name]))

            if failures:
                results.append(self.make_result(self.object_key(policy), failures))
        return results

    @staticmethod
    def _selects_any(pods: List[Any], namespace: str, match_labels: Dict[str, str]) -> bool:
        for pod in pods:
            if pod.metadata.namespace != namespace:
                continue
            labels = pod.metadata.labels or {}
            if all(labels.get(key) == value for key, value in match_labels.items()):
                return True
        return False
