"""
PersistentVolumeClaim Analyzer for Kubernetes Diagnostics
"""

from typing import List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Result


class PersistentVolumeClaimAnalyzer(BaseAnalyzer):
    """Flags pending claims whose most recent event is a provisioning failure"""

    name = "PersistentVolumeClaim"
    doc_reference = "https://kubernetes.io/docs/concepts/storage/persistent-volumes/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for claim in context.client.list_persistent_volume_claims(context.namespace):
            if not claim.status or claim.status.phase != "Pending":
                continue

            metadata = claim.metadata
            events = context.client.list_events(metadata.namespace, f"involvedObject.name={metadata.name}")
            if not events:
                continue

            latest = max(events, key=lambda e: str(e.last_timestamp or e.event_time or ""))
            if latest.reason == "ProvisioningFailed" and latest.message:
                failure = self.make_failure(context, latest.message, [metadata.name])
                results.append(self.make_result(self.object_key(claim), [failure]))
        return results
