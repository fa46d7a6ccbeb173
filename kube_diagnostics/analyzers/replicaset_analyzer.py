"""
ReplicaSet Analyzer for Kubernetes Diagnostics
"""

from typing import List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Result


class ReplicaSetAnalyzer(BaseAnalyzer):
    """Flags replica sets that cannot create their pods"""

    name = "ReplicaSet"
    doc_reference = "https://kubernetes.io/docs/concepts/workloads/controllers/replicaset/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for replica_set in context.client.list_replica_sets(context.namespace):
            status = replica_set.status
            if not status or status.replicas:
                continue

            failures = []
            for condition in status.conditions or []:
                if condition.type == "ReplicaFailure" and condition.reason == "FailedCreate":
                    failures.append(self.make_failure(context, condition.message or condition.reason))

            if failures:
                owners = replica_set.metadata.owner_references or []
                parent = f"{owners[0].kind}/{owners[0].name}" if owners else ""
                results.append(self.make_result(self.object_key(replica_set), failures, parent))
        return results
