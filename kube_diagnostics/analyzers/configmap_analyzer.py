"""
ConfigMap Analyzer for Kubernetes Diagnostics

Reports config maps that no pod in their namespace references (through
volumes, env or envFrom) and config maps without any data.
"""

from collections import defaultdict
from typing import Any, Dict, List, Set

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Result

# Created by the control plane in every namespace
SYSTEM_CONFIG_MAPS = {"kube-root-ca.crt"}


class ConfigMapAnalyzer(BaseAnalyzer):
    """Finds unused and empty config maps"""

    name = "ConfigMap"
    doc_reference = "https://kubernetes.io/docs/concepts/configuration/configmap/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        config_maps = context.client.list_config_maps(context.namespace)
        if not config_maps:
            return []

        used = self._referenced_config_maps(context.client.list_pods(context.namespace))

        results = []
        for config_map in config_maps:
            metadata = config_map.metadata
            if metadata.name in SYSTEM_CONFIG_MAPS:
                continue

            failures = []
            if metadata.name not in used[metadata.namespace]:
                text = f"ConfigMap {metadata.name} is not used by any pods in the namespace"
                failures.append(self.make_failure(context, text, [metadata.name]))
            if not config_map.data and not config_map.binary_data:
                text = f"ConfigMap {metadata.name} is empty"
                failures.append(self.make_failure(context, text, [metadata.name]))

            if failures:
                results.append(self.make_result(self.object_key(config_map), failures))
        return results

    @staticmethod
    def _referenced_config_maps(pods: List[Any]) -> Dict[str, Set[str]]:
        used: Dict[str, Set[str]] = defaultdict(set)
        for pod in pods:
            names = used[pod.metadata.namespace]
            spec = pod.spec
            if not spec:
                continue

            for volume in spec.volumes or []:
                if volume.config_map:
                    names.add(volume.config_map.name)
                if volume.projected:
                    for source in volume.projected.sources or []:
                        if source.config_map:
                            names.add(source.config_map.name)

            for container in list(spec.init_containers or []) + list(spec.containers or []):
                for env in container.env or []:
                    ref = env.value_from.config_map_key_ref if env.value_from else None
                    if ref:
                        names.add(ref.name)
                for env_from in container.env_from or []:
                    if env_from.config_map_ref:
                        names.add(env_from.config_map_ref.name)
        return used
