"""Built-in resource analyzers"""

from .configmap_analyzer import ConfigMapAnalyzer
from .deployment_analyzer import DeploymentAnalyzer
from .hpa_analyzer import HorizontalPodAutoscalerAnalyzer
from .ingress_analyzer import IngressAnalyzer
from .netpol_analyzer import NetworkPolicyAnalyzer
from .pod_analyzer import PodAnalyzer
from .pvc_analyzer import PersistentVolumeClaimAnalyzer
from .replicaset_analyzer import ReplicaSetAnalyzer
from .service_analyzer import ServiceAnalyzer
from .statefulset_analyzer import StatefulSetAnalyzer

# Registration order is the order the core set runs in
BUILTIN_ANALYZERS = [
    PodAnalyzer,
    DeploymentAnalyzer,
    ReplicaSetAnalyzer,
    PersistentVolumeClaimAnalyzer,
    ServiceAnalyzer,
    IngressAnalyzer,
    StatefulSetAnalyzer,
    ConfigMapAnalyzer,
    HorizontalPodAutoscalerAnalyzer,
    NetworkPolicyAnalyzer,
]

__all__ = [
    "BUILTIN_ANALYZERS",
    "ConfigMapAnalyzer",
    "DeploymentAnalyzer",
    "HorizontalPodAutoscalerAnalyzer",
    "IngressAnalyzer",
    "NetworkPolicyAnalyzer",
    "PersistentVolumeClaimAnalyzer",
    "PodAnalyzer",
    "ReplicaSetAnalyzer",
    "ServiceAnalyzer",
    "StatefulSetAnalyzer",
]
