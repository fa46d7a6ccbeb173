"""
StatefulSet Analyzer for Kubernetes Diagnostics

A stateful set needs its governing (headless) service and the storage
classes named by its volume claim templates.
"""

from typing import List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Result


class StatefulSetAnalyzer(BaseAnalyzer):
    """Checks service and storage class references of stateful sets"""

    name = "StatefulSet"
    doc_reference = "https://kubernetes.io/docs/concepts/workloads/controllers/statefulset/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for stateful_set in context.client.list_stateful_sets(context.namespace):
            namespace = stateful_set.metadata.namespace
            spec = stateful_set.spec
            if not spec:
                continue

            failures = []
            if spec.service_name and context.client.get_service(namespace, spec.service_name) is None:
                text = f"StatefulSet uses the service {namespace}/{spec.service_name} which does not exist."
                failures.append(self.make_failure(context, text, [namespace, spec.service_name]))

            checked = set()
            for template in spec.volume_claim_templates or []:
                storage_class = template.spec.storage_class_name if template.spec else None
                if not storage_class or storage_class in checked:
                    continue
                checked.add(storage_class)
                if context.client.get_storage_class(storage_class) is None:
                    text = f"StatefulSet uses the storage class {storage_class} which does not exist."
                    failures.append(self.make_failure(context, text, [storage_class]))

            if failures:
                results.append(self.make_result(self.object_key(stateful_set), failures))
        return results
