"""
Unit tests for the built-in analyzers
"""

import unittest

from kubernetes import client

from kube_diagnostics.analyzers import (
    ConfigMapAnalyzer,
    DeploymentAnalyzer,
    HorizontalPodAutoscalerAnalyzer,
    IngressAnalyzer,
    NetworkPolicyAnalyzer,
    PersistentVolumeClaimAnalyzer,
    PodAnalyzer,
    ReplicaSetAnalyzer,
    ServiceAnalyzer,
    StatefulSetAnalyzer,
)
from kube_diagnostics.base_analyzer import AnalyzerContext
from tests.fake_cluster import UNSCHEDULABLE_MESSAGE, FakeKubernetesClient, meta, unschedulable_pod


def context_for(fake, namespace="default", with_doc=False):
    return AnalyzerContext(client=fake, namespace=namespace, with_doc=with_doc)


def container_status(name, state, last_state=None):
    return client.V1ContainerStatus(
        name=name, image="nginx", image_id="", ready=False, restart_count=3, state=state, last_state=last_state
    )


def running_pod(name, labels=None, spec=None):
    return client.V1Pod(metadata=meta(name, labels=labels), spec=spec, status=client.V1PodStatus(phase="Running"))


class TestPodAnalyzer(unittest.TestCase):
    """Test PodAnalyzer"""

    def test_unschedulable_pod(self):
        """Test pending pods report the scheduler message"""
        results = PodAnalyzer().analyze(context_for(FakeKubernetesClient(pods=[unschedulable_pod()])))

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].kind, "Pod")
        self.assertEqual(results[0].name, "default/example")
        self.assertEqual(results[0].error[0].text, UNSCHEDULABLE_MESSAGE)

    def test_crash_loop_back_off(self):
        """Test crash looping containers report the last termination reason"""
        pod = client.V1Pod(
            metadata=meta(
                "web-7d9f",
                owner_references=[
                    client.V1OwnerReference(api_version="apps/v1", kind="ReplicaSet", name="web-7d", uid="1")
                ],
            ),
            status=client.V1PodStatus(
                phase="Running",
                container_statuses=[
                    container_status(
                        "app",
                        client.V1ContainerState(waiting=client.V1ContainerStateWaiting(reason="CrashLoopBackOff")),
                        client.V1ContainerState(
                            terminated=client.V1ContainerStateTerminated(exit_code=137, reason="OOMKilled")
                        ),
                    )
                ],
            ),
        )

        results = PodAnalyzer().analyze(context_for(FakeKubernetesClient(pods=[pod])))

        failure = results[0].error[0]
        self.assertEqual(failure.text, "the last termination reason is OOMKilled container=app pod=web-7d9f")
        self.assertEqual({s.unmasked for s in failure.sensitive}, {"app", "web-7d9f"})
        self.assertEqual(results[0].parent_object, "ReplicaSet/web-7d")

    def test_image_pull_error(self):
        """Test image pull failures use the kubelet message"""
        state = client.V1ContainerState(
            waiting=client.V1ContainerStateWaiting(
                reason="ImagePullBackOff", message="Back-off pulling image nginx:bad"
            )
        )
        pod = client.V1Pod(
            metadata=meta("web"),
            status=client.V1PodStatus(phase="Pending", container_statuses=[container_status("app", state)]),
        )

        results = PodAnalyzer().analyze(context_for(FakeKubernetesClient(pods=[pod])))

        self.assertEqual(results[0].error[0].text, "Back-off pulling image nginx:bad")

    def test_healthy_pod(self):
        """Test running pods produce no result"""
        results = PodAnalyzer().analyze(context_for(FakeKubernetesClient(pods=[running_pod("web")])))

        self.assertEqual(results, [])

    def test_doc_links(self):
        """Test documentation links are only attached when requested"""
        fake = FakeKubernetesClient(pods=[unschedulable_pod()])

        without_doc = PodAnalyzer().analyze(context_for(fake))
        with_doc = PodAnalyzer().analyze(context_for(fake, with_doc=True))

        self.assertEqual(without_doc[0].error[0].kubernetes_doc, "")
        self.assertEqual(with_doc[0].error[0].kubernetes_doc, PodAnalyzer.doc_reference)


class TestServiceAnalyzer(unittest.TestCase):
    """Test ServiceAnalyzer"""

    def make_service(self, name="web", selector=None):
        return client.V1Service(metadata=meta(name), spec=client.V1ServiceSpec(selector=selector))

    def test_no_endpoints(self):
        """Test one failure per selector label"""
        fake = FakeKubernetesClient(
            endpoints=[client.V1Endpoints(metadata=meta("web"))],
            services=[self.make_service(selector={"app": "web", "tier": "frontend"})],
        )

        results = ServiceAnalyzer().analyze(context_for(fake))

        self.assertEqual(results[0].name, "default/web")
        self.assertEqual(
            [f.text for f in results[0].error],
            [
                "Service has no endpoints, expected label app=web",
                "Service has no endpoints, expected label tier=frontend",
            ],
        )

    def test_leader_election_endpoints_are_ignored(self):
        """Test leader election Endpoints objects are skipped"""
        annotations = {"control-plane.alpha.kubernetes.io/leader": "{}"}
        endpoints = client.V1Endpoints(metadata=meta("kube-scheduler", annotations=annotations))
        fake = FakeKubernetesClient(endpoints=[endpoints])

        self.assertEqual(ServiceAnalyzer().analyze(context_for(fake)), [])

    def test_endpoints_without_service(self):
        """Test orphan Endpoints objects are not reported"""
        fake = FakeKubernetesClient(endpoints=[client.V1Endpoints(metadata=meta("orphan"))])

        self.assertEqual(ServiceAnalyzer().analyze(context_for(fake)), [])

    def test_not_ready_addresses(self):
        """Test pods failing readiness are listed"""
        subset = client.V1EndpointSubset(
            not_ready_addresses=[
                client.V1EndpointAddress(ip="10.0.0.5", target_ref=client.V1ObjectReference(kind="Pod", name="web-1"))
            ]
        )
        fake = FakeKubernetesClient(
            endpoints=[client.V1Endpoints(metadata=meta("web"), subsets=[subset])],
            services=[self.make_service(selector={"app": "web"})],
        )

        results = ServiceAnalyzer().analyze(context_for(fake))

        self.assertEqual(results[0].error[0].text, "Service has not ready endpoints, pods: Pod/web-1, expected 1")


class TestIngressAnalyzer(unittest.TestCase):
    """Test IngressAnalyzer"""

    def make_ingress(self, class_name="nginx", service="web", secret=None):
        rules = [
            client.V1IngressRule(
                http=client.V1HTTPIngressRuleValue(
                    paths=[
                        client.V1HTTPIngressPath(
                            path="/",
                            path_type="Prefix",
                            backend=client.V1IngressBackend(
                                service=client.V1IngressServiceBackend(
                                    name=service, port=client.V1ServiceBackendPort(number=80)
                                )
                            ),
                        )
                    ]
                )
            )
        ]
        tls = [client.V1IngressTLS(secret_name=secret)] if secret else None
        return client.V1Ingress(
            metadata=meta("web"), spec=client.V1IngressSpec(ingress_class_name=class_name, rules=rules, tls=tls)
        )

    def test_missing_class(self):
        """Test ingresses without a class"""
        fake = FakeKubernetesClient(ingresses=[client.V1Ingress(metadata=meta("web", annotations={}))])

        results = IngressAnalyzer().analyze(context_for(fake))

        self.assertEqual(results[0].error[0].text, "Ingress default/web does not specify an Ingress class.")

    def test_class_from_annotation(self):
        """Test the legacy class annotation is honored"""
        ingress = client.V1Ingress(metadata=meta("web", annotations={"kubernetes.io/ingress.class": "nginx"}))
        fake = FakeKubernetesClient(
            ingresses=[ingress], ingress_classes=[client.V1IngressClass(metadata=meta("nginx", namespace=None))]
        )

        self.assertEqual(IngressAnalyzer().analyze(context_for(fake)), [])

    def test_broken_references(self):
        """Test unknown class, missing service and missing secret"""
        fake = FakeKubernetesClient(ingresses=[self.make_ingress(secret="web-tls")])

        results = IngressAnalyzer().analyze(context_for(fake))

        self.assertEqual(
            [f.text for f in results[0].error],
            [
                "Ingress uses the ingress class nginx which does not exist.",
                "Ingress uses the service default/web which does not exist.",
                "Ingress uses the secret default/web-tls as a TLS certificate which does not exist.",
            ],
        )

    def test_valid_ingress(self):
        """Test ingresses with existing references"""
        fake = FakeKubernetesClient(
            ingresses=[self.make_ingress(secret="web-tls")],
            ingress_classes=[client.V1IngressClass(metadata=meta("nginx", namespace=None))],
            services=[client.V1Service(metadata=meta("web"))],
            secrets=[client.V1Secret(metadata=meta("web-tls"))],
        )

        self.assertEqual(IngressAnalyzer().analyze(context_for(fake)), [])


class TestWorkloadAnalyzers(unittest.TestCase):
    """Test Deployment, ReplicaSet and StatefulSet analyzers"""

    def test_deployment_replica_mismatch(self):
        """Test deployments with missing replicas"""
        deployment = client.V1Deployment(
            metadata=meta("web"),
            spec=client.V1DeploymentSpec(
                replicas=3,
                selector=client.V1LabelSelector(match_labels={"app": "web"}),
                template=client.V1PodTemplateSpec(),
            ),
            status=client.V1DeploymentStatus(ready_replicas=1),
        )

        results = DeploymentAnalyzer().analyze(context_for(FakeKubernetesClient(deployments=[deployment])))

        self.assertEqual(results[0].error[0].text, "Deployment default/web has 3 replicas but 1 are available")

    def test_deployment_ready(self):
        """Test healthy deployments"""
        deployment = client.V1Deployment(
            metadata=meta("web"),
            spec=client.V1DeploymentSpec(
                replicas=2,
                selector=client.V1LabelSelector(match_labels={"app": "web"}),
                template=client.V1PodTemplateSpec(),
            ),
            status=client.V1DeploymentStatus(ready_replicas=2),
        )

        self.assertEqual(DeploymentAnalyzer().analyze(context_for(FakeKubernetesClient(deployments=[deployment]))), [])

    def test_replica_set_failed_create(self):
        """Test replica sets that cannot create pods"""
        replica_set = client.V1ReplicaSet(
            metadata=meta(
                "web-7d",
                owner_references=[
                    client.V1OwnerReference(api_version="apps/v1", kind="Deployment", name="web", uid="1")
                ],
            ),
            spec=client.V1ReplicaSetSpec(selector=client.V1LabelSelector(match_labels={"app": "web"})),
            status=client.V1ReplicaSetStatus(
                replicas=0,
                conditions=[
                    client.V1ReplicaSetCondition(
                        type="ReplicaFailure",
                        status="True",
                        reason="FailedCreate",
                        message='pods "web-7d-" is forbidden: exceeded quota',
                    )
                ],
            ),
        )

        results = ReplicaSetAnalyzer().analyze(context_for(FakeKubernetesClient(replica_sets=[replica_set])))

        self.assertEqual(results[0].error[0].text, 'pods "web-7d-" is forbidden: exceeded quota')
        self.assertEqual(results[0].parent_object, "Deployment/web")

    def test_stateful_set_references(self):
        """Test missing governing service and storage class"""
        stateful_set = client.V1StatefulSet(
            metadata=meta("db"),
            spec=client.V1StatefulSetSpec(
                service_name="db-headless",
                selector=client.V1LabelSelector(match_labels={"app": "db"}),
                template=client.V1PodTemplateSpec(),
                volume_claim_templates=[
                    client.V1PersistentVolumeClaim(
                        metadata=meta("data"), spec=client.V1PersistentVolumeClaimSpec(storage_class_name="fast-ssd")
                    )
                ],
            ),
        )

        results = StatefulSetAnalyzer().analyze(context_for(FakeKubernetesClient(stateful_sets=[stateful_set])))

        self.assertEqual(
            [f.text for f in results[0].error],
            [
                "StatefulSet uses the service default/db-headless which does not exist.",
                "StatefulSet uses the storage class fast-ssd which does not exist.",
            ],
        )


class TestPersistentVolumeClaimAnalyzer(unittest.TestCase):
    """Test PersistentVolumeClaimAnalyzer"""

    def make_event(self, reason, message, timestamp):
        return client.CoreV1Event(
            metadata=meta(f"data.{timestamp}"),
            involved_object=client.V1ObjectReference(kind="PersistentVolumeClaim", name="data"),
            reason=reason,
            message=message,
            last_timestamp=timestamp,
        )

    def test_provisioning_failed(self):
        """Test the latest provisioning failure is reported"""
        claim = client.V1PersistentVolumeClaim(
            metadata=meta("data"), status=client.V1PersistentVolumeClaimStatus(phase="Pending")
        )
        events = [
            self.make_event("ExternalProvisioning", "waiting for a volume", "2024-01-01T00:00:00Z"),
            self.make_event(
                "ProvisioningFailed", 'storageclass.storage.k8s.io "fast" not found', "2024-01-01T00:01:00Z"
            ),
        ]

        fake = FakeKubernetesClient(claims=[claim], events=events)

        results = PersistentVolumeClaimAnalyzer().analyze(context_for(fake))

        self.assertEqual(results[0].error[0].text, 'storageclass.storage.k8s.io "fast" not found')

    def test_bound_claim(self):
        """Test bound claims are not inspected"""
        claim = client.V1PersistentVolumeClaim(
            metadata=meta("data"), status=client.V1PersistentVolumeClaimStatus(phase="Bound")
        )

        self.assertEqual(PersistentVolumeClaimAnalyzer().analyze(context_for(FakeKubernetesClient(claims=[claim]))), [])


class TestConfigMapAnalyzer(unittest.TestCase):
    """Test ConfigMapAnalyzer"""

    def test_unused_and_empty(self):
        """Test unused config maps and empty config maps"""
        volume = client.V1Volume(name="settings", config_map=client.V1ConfigMapVolumeSource(name="settings"))
        pod = running_pod("web", spec=client.V1PodSpec(containers=[client.V1Container(name="app")], volumes=[volume]))
        fake = FakeKubernetesClient(
            pods=[pod],
            config_maps=[
                client.V1ConfigMap(metadata=meta("settings"), data={"key": "value"}),
                client.V1ConfigMap(metadata=meta("leftover")),
                client.V1ConfigMap(metadata=meta("kube-root-ca.crt"), data={"ca.crt": "..."}),
            ],
        )

        results = ConfigMapAnalyzer().analyze(context_for(fake))

        self.assertEqual([r.name for r in results], ["default/leftover"])
        self.assertEqual(
            [f.text for f in results[0].error],
            ["ConfigMap leftover is not used by any pods in the namespace", "ConfigMap leftover is empty"],
        )


class TestAdditionalAnalyzers(unittest.TestCase):
    """Test analyzers outside the core set"""

    def test_not_core(self):
        """Test additional analyzers only run when selected"""
        self.assertFalse(HorizontalPodAutoscalerAnalyzer.core)
        self.assertFalse(NetworkPolicyAnalyzer.core)

    def test_hpa_missing_target(self):
        """Test autoscalers pointing at missing workloads"""
        hpa = client.V2HorizontalPodAutoscaler(
            metadata=meta("web"),
            spec=client.V2HorizontalPodAutoscalerSpec(
                max_replicas=5,
                scale_target_ref=client.V2CrossVersionObjectReference(
                    api_version="apps/v1", kind="Deployment", name="web"
                ),
            ),
        )

        results = HorizontalPodAutoscalerAnalyzer().analyze(context_for(FakeKubernetesClient(hpas=[hpa])))

        self.assertEqual(
            results[0].error[0].text,
            "HorizontalPodAutoscaler uses Deployment/web as ScaleTargetRef which does not exist.",
        )

    def test_network_policies(self):
        """Test policies selecting every pod or no pod"""
        allow_all = client.V1NetworkPolicy(
            metadata=meta("allow-all"), spec=client.V1NetworkPolicySpec(pod_selector=client.V1LabelSelector())
        )
        unused = client.V1NetworkPolicy(
            metadata=meta("db-only"),
            spec=client.V1NetworkPolicySpec(pod_selector=client.V1LabelSelector(match_labels={"app": "db"})),
        )
        applied = client.V1NetworkPolicy(
            metadata=meta("web-only"),
            spec=client.V1NetworkPolicySpec(pod_selector=client.V1LabelSelector(match_labels={"app": "web"})),
        )
        fake = FakeKubernetesClient(
            network_policies=[allow_all, unused, applied], pods=[running_pod("web", labels={"app": "web"})]
        )

        results = NetworkPolicyAnalyzer().analyze(context_for(fake))

        self.assertEqual(
            [f.text for r in results for f in r.error],
            [
                "Network policy allows traffic to all pods: allow-all",
                "Network policy is not applied to any pods: db-only",
            ],
        )


if __name__ == "__main__":
    unittest.main()
