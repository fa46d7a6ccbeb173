"""
Pod Analyzer for Kubernetes Diagnostics

Flags pods that cannot be scheduled and containers stuck in an error state:
- Pending pods whose PodScheduled condition reports Unschedulable
- Containers waiting in CrashLoopBackOff (with the last termination reason)
- Containers waiting on image pulls or container configuration errors
- Containers that terminated with a non-zero exit code
"""

from typing import Any, List

from ..base_analyzer import AnalyzerContext, BaseAnalyzer
from ..models import Failure, Result

WAITING_ERROR_REASONS = {
    "ImagePullBackOff",
    "ErrImagePull",
    "InvalidImageName",
    "CreateContainerConfigError",
    "CreateContainerError",
    "RunContainerError",
}


class PodAnalyzer(BaseAnalyzer):
    """Analyzes pod scheduling and container states"""

    name = "Pod"
    doc_reference = "https://kubernetes.io/docs/concepts/workloads/pods/pod-lifecycle/"

    def analyze(self, context: AnalyzerContext) -> List[Result]:
        results = []
        for pod in context.client.list_pods(context.namespace):
            failures = self._check_scheduling(context, pod)
            failures.extend(self._check_containers(context, pod))
            if failures:
                results.append(self.make_result(self.object_key(pod), failures, self._owner(pod)))
        return results

    def _check_scheduling(self, context: AnalyzerContext, pod: Any) -> List[Failure]:
        status = pod.status
        if not status or status.phase != "Pending":
            return []

        failures = []
        for condition in status.conditions or []:
            if condition.type == "PodScheduled" and condition.reason == "Unschedulable" and condition.message:
                failures.append(self.make_failure(context, condition.message))
        return failures

    def _check_containers(self, context: AnalyzerContext, pod: Any) -> List[Failure]:
        status = pod.status
        if not status:
            return []

        failures = []
        statuses = list(status.init_container_statuses or []) + list(status.container_statuses or [])
        for container in statuses:
            state = container.state
            if state is None:
                continue

            if state.waiting:
                reason = state.waiting.reason or ""
                if reason == "CrashLoopBackOff":
                    last = container.last_state.terminated if container.last_state else None
                    last_reason = last.reason if last and last.reason else "unknown"
                    text = (
                        f"the last termination reason is {last_reason} "
                        f"container={container.name} pod={pod.metadata.name}"
                    )
                    failures.append(self.make_failure(context, text, [container.name, pod.metadata.name]))
                elif reason in WAITING_ERROR_REASONS:
                    text = state.waiting.message or f"the container {container.name} is waiting: {reason}"
                    failures.append(self.make_failure(context, text, [container.name]))

            elif state.terminated and state.terminated.exit_code and status.phase != "Succeeded":
                terminated = state.terminated
                text = (
                    f"the container {container.name} terminated with exit code {terminated.exit_code}"
                    f" ({terminated.reason or 'Error'})"
                )
                failures.append(self.make_failure(context, text, [container.name]))

        return failures

    @staticmethod
    def _owner(pod: Any) -> str:
        owners = pod.metadata.owner_references or []
        if owners:
            return f"{owners[0].kind}/{owners[0].name}"
        return ""
