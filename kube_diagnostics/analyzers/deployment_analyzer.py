"""
Deployment Analyzer for Kubernetes Diagnostics
"""

from typing import List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Result


class DeploymentAnalyzer(BaseAnalyzer):
    """Flags deployments whose ready replica count differs from the desired count"""

    name = "Deployment"
    doc_reference = "https://kubernetes.io/docs/concepts/workloads/controllers/deployment/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for deployment in context.client.list_deployments(context.namespace):
            desired = deployment.spec.replicas if deployment.spec and deployment.spec.replicas is not None else 1
            ready = (deployment.status.ready_replicas if deployment.status else None) or 0
            if desired == ready:
                continue

            metadata = deployment.metadata
            text = f"Deployment {metadata.namespace}/{metadata.name} has {desired} replicas but {ready} are available"
            failure = self.make_failure(context, text, [metadata.namespace, metadata.name])
            results.append(self.make_result(self.object_key(deployment), [failure]))
        return results
