"""
Kubernetes API client wrapper for Kubernetes Diagnostics.

This module provides a thin wrapper around the official Kubernetes client:
lazy initialization of the API groups, property-based access and a handful
of list/read helpers the analyzers share. An empty namespace means "all
namespaces" everywhere in this module.

Credentials come from a kubeconfig file, the in-cluster service account, or,
for AKS clusters, from the Azure management API.
"""

import logging
from typing import Any, List, Optional

import yaml
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
from azure.identity import DefaultAzureCredential
from azure.mgmt.containerservice import ContainerServiceClient
from kubernetes import client
from kubernetes import config as kube_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from .exceptions import ClusterConnectionError

HTTP_NOT_FOUND = 404


class KubernetesClient:
    """
    Thin wrapper for Kubernetes API clients.

    Usage:
        # Create client from the current kubeconfig context
        kube = KubernetesClient.from_kubeconfig()

        # Direct API access
        pods = kube.core_v1.list_namespaced_pod("default").items

        # Helper methods used by the analyzers
        pods = kube.list_pods("default")
    """

    def __init__(self, api_client: Optional[client.ApiClient] = None):
        """
        Initialize Kubernetes client wrapper.

        Args:
            api_client: Configured ApiClient. The default configuration is used when omitted.
        """
        self.api_client = api_client or client.ApiClient()
        self.logger = logging.getLogger("kube_diagnostics.kubernetes_client")

        # Lazy initialization - API groups created on first access
        self._core_v1 = None
        self._apps_v1 = None
        self._networking_v1 = None
        self._autoscaling_v2 = None
        self._storage_v1 = None

    @classmethod
    def from_kubeconfig(cls, kubeconfig: Optional[str] = None, context: Optional[str] = None) -> "KubernetesClient":
        """
        Build a client from a kubeconfig file, falling back to in-cluster configuration.

        Args:
            kubeconfig: Path to kubeconfig (defaults to KUBECONFIG / ~/.kube/config)
            context: Kubeconfig context name

        Returns:
            KubernetesClient instance

        Raises:
            ClusterConnectionError: If no usable configuration is found
        """
        try:
            api_client = kube_config.new_client_from_config(config_file=kubeconfig, context=context)
        except (ConfigException, OSError) as e:
            if kubeconfig or context:
                raise ClusterConnectionError(f"Failed to load kubeconfig: {e}") from e
            try:
                kube_config.load_incluster_config()
            except ConfigException as incluster_error:
                raise ClusterConnectionError(
                    f"No kubeconfig found and not running inside a cluster: {incluster_error}"
                ) from incluster_error
            api_client = client.ApiClient()
        return cls(api_client)

    @classmethod
    def from_aks(
        cls, subscription_id: str, resource_group: str, cluster_name: str, credential: Any = None
    ) -> "KubernetesClient":
        """
        Build a client from AKS user credentials.

        Equivalent to: az aks get-credentials -g {rg} -n {name}

        Args:
            subscription_id: Azure subscription ID
            resource_group: Resource group of the cluster
            cluster_name: AKS cluster name
            credential: Azure credential (DefaultAzureCredential when omitted)

        Returns:
            KubernetesClient instance

        Raises:
            ClusterConnectionError: If the cluster or its credentials cannot be retrieved
        """
        aks_client = ContainerServiceClient(credential or DefaultAzureCredential(), subscription_id)
        try:
            credentials = aks_client.managed_clusters.list_cluster_user_credentials(resource_group, cluster_name)
        except ResourceNotFoundError as e:
            raise ClusterConnectionError(
                f"Cluster '{cluster_name}' not found in resource group '{resource_group}'"
            ) from e
        except HttpResponseError as e:
            raise ClusterConnectionError(f"Failed to get credentials for cluster '{cluster_name}': {e.message}") from e
        finally:
            aks_client.close()

        if not credentials.kubeconfigs:
            raise ClusterConnectionError(f"No kubeconfig returned for cluster '{cluster_name}'")

        try:
            config_dict = yaml.safe_load(credentials.kubeconfigs[0].value)
            api_client = kube_config.new_client_from_config_dict(config_dict)
        except (yaml.YAMLError, ConfigException) as e:
            raise ClusterConnectionError(f"Invalid kubeconfig returned for cluster '{cluster_name}': {e}") from e
        return cls(api_client)

    @property
    def core_v1(self) -> client.CoreV1Api:
        """Get or create CoreV1Api (pods, services, endpoints, events, ...)"""
        if not self._core_v1:
            self._core_v1 = client.CoreV1Api(self.api_client)
        return self._core_v1

    @property
    def apps_v1(self) -> client.AppsV1Api:
        """Get or create AppsV1Api (deployments, replica sets, stateful sets)"""
        if not self._apps_v1:
            self._apps_v1 = client.AppsV1Api(self.api_client)
        return self._apps_v1

    @property
    def networking_v1(self) -> client.NetworkingV1Api:
        """Get or create NetworkingV1Api (ingresses, ingress classes, network policies)"""
        if not self._networking_v1:
            self._networking_v1 = client.NetworkingV1Api(self.api_client)
        return self._networking_v1

    @property
    def autoscaling_v2(self) -> client.AutoscalingV2Api:
        if not self._autoscaling_v2:
            self._autoscaling_v2 = client.AutoscalingV2Api(self.api_client)
        return self._autoscaling_v2

    @property
    def storage_v1(self) -> client.StorageV1Api:
        if not self._storage_v1:
            self._storage_v1 = client.StorageV1Api(self.api_client)
        return self._storage_v1

    # Helper methods shared by the analyzers

    def _read(self, reader, *args) -> Any:
        """Call a read_* API method, returning None when the object does not exist"""
        try:
            return reader(*args)
        except ApiException as e:
            if e.status == HTTP_NOT_FOUND:
                return None
            raise

    def list_pods(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.core_v1.list_namespaced_pod(namespace).items
        return self.core_v1.list_pod_for_all_namespaces().items

    def get_service(self, namespace: str, name: str) -> Optional[Any]:
        return self._read(self.core_v1.read_namespaced_service, name, namespace)

    def list_endpoints(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.core_v1.list_namespaced_endpoints(namespace).items
        return self.core_v1.list_endpoints_for_all_namespaces().items

    def get_secret(self, namespace: str, name: str) -> Optional[Any]:
        return self._read(self.core_v1.read_namespaced_secret, name, namespace)

    def list_config_maps(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.core_v1.list_namespaced_config_map(namespace).items
        return self.core_v1.list_config_map_for_all_namespaces().items

    def list_persistent_volume_claims(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.core_v1.list_namespaced_persistent_volume_claim(namespace).items
        return self.core_v1.list_persistent_volume_claim_for_all_namespaces().items

    def list_events(self, namespace: str = "", field_selector: str = "") -> List[Any]:
        """
        List events, optionally restricted with a field selector.

        Args:
            namespace: Namespace to search
            field_selector: e.g. "involvedObject.name=my-claim"

        Returns:
            List of CoreV1Event objects
        """
        if namespace:
            return self.core_v1.list_namespaced_event(namespace, field_selector=field_selector).items
        return self.core_v1.list_event_for_all_namespaces(field_selector=field_selector).items

    def list_deployments(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.apps_v1.list_namespaced_deployment(namespace).items
        return self.apps_v1.list_deployment_for_all_namespaces().items

    def list_replica_sets(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.apps_v1.list_namespaced_replica_set(namespace).items
        return self.apps_v1.list_replica_set_for_all_namespaces().items

    def list_stateful_sets(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.apps_v1.list_namespaced_stateful_set(namespace).items
        return self.apps_v1.list_stateful_set_for_all_namespaces().items

    def get_scale_target(self, namespace: str, kind: str, name: str) -> Optional[Any]:
        """
        Read the workload an autoscaler points at.

        Returns:
            The object, or None if it does not exist or the kind is not supported
        """
        readers = {
            "Deployment": self.apps_v1.read_namespaced_deployment,
            "ReplicaSet": self.apps_v1.read_namespaced_replica_set,
            "StatefulSet": self.apps_v1.read_namespaced_stateful_set,
        }
        reader = readers.get(kind)
        if reader is None:
            return None
        return self._read(reader, name, namespace)

    def list_ingresses(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.networking_v1.list_namespaced_ingress(namespace).items
        return self.networking_v1.list_ingress_for_all_namespaces().items

    def get_ingress_class(self, name: str) -> Optional[Any]:
        return self._read(self.networking_v1.read_ingress_class, name)

    def list_network_policies(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.networking_v1.list_namespaced_network_policy(namespace).items
        return self.networking_v1.list_network_policy_for_all_namespaces().items

    def list_horizontal_pod_autoscalers(self, namespace: str = "") -> List[Any]:
        if namespace:
            return self.autoscaling_v2.list_namespaced_horizontal_pod_autoscaler(namespace).items
        return self.autoscaling_v2.list_horizontal_pod_autoscaler_for_all_namespaces().items

    def get_storage_class(self, name: str) -> Optional[Any]:
        return self._read(self.storage_v1.read_storage_class, name)

    def close(self):
        """Close the underlying API client and release its connection pool."""
        if self.api_client:
            self.api_client.close()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure cleanup"""
        self.close()
