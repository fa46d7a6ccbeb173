"""
HorizontalPodAutoscaler Analyzer for Kubernetes Diagnostics
"""

from typing import List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Result


class HorizontalPodAutoscalerAnalyzer(BaseAnalyzer):
    """Flags autoscalers whose scale target does not exist"""

    name = "HorizontalPodAutoscaler"
    core = False
    doc_reference = "https://kubernetes.io/docs/tasks/run-application/horizontal-pod-autoscale/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for hpa in context.client.list_horizontal_pod_autoscalers(context.namespace):
            target = hpa.spec.scale_target_ref if hpa.spec else None
            if not target:
                continue

            namespace = hpa.metadata.namespace
            if context.client.get_scale_target(namespace, target.kind, target.name) is None:
                text = (
                    f"HorizontalPodAutoscaler uses {target.kind}/{target.name} "
                    "as ScaleTargetRef which does not exist."
                )
                failure = self.make_failure(context, text, [target.name])
                results.append(self.make_result(self.object_key(hpa), [failure]))
        return results
