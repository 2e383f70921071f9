"""Test cost estimation."""

import pytest

from kubeinsight.core.cost import CostEstimator
from kubeinsight.model.config import CostThresholds, PricingConfig
from kubeinsight.model.cost import EfficiencyTier, Priority
from kubeinsight.model.snapshot import ClusterSnapshot, UsageSample

GIB = 1024**3
MIB = 1024**2


class TestNodeCosts:
    def test_total_is_sum_of_nodes(self, sample_snapshot):
        """Test the cluster total adds up node costs exactly."""
        analysis = CostEstimator().analyze(sample_snapshot)

        assert analysis.total_monthly_cost == sum(n.monthly_cost for n in analysis.node_costs)
        assert analysis.total_monthly_cost == pytest.approx(0.096 * 720 + 0.0416 * 720)

    def test_efficiency_from_usage(self, sample_snapshot):
        analysis = CostEstimator().analyze(sample_snapshot)
        nodes = {n.name: n for n in analysis.node_costs}

        assert nodes["node-1"].cpu_utilization == pytest.approx(75.0)
        assert nodes["node-1"].efficiency == EfficiencyTier.EXCELLENT
        assert nodes["node-2"].efficiency == EfficiencyTier.POOR

    def test_no_metrics(self, make_node):
        """Test nodes without samples report no utilization."""
        analysis = CostEstimator().analyze(ClusterSnapshot(nodes=[make_node()]))

        [node] = analysis.node_costs
        assert node.cpu_utilization is None
        assert node.memory_utilization is None
        assert node.efficiency == EfficiencyTier.NO_METRICS

    @pytest.mark.parametrize(
        "cpu, memory, expected",
        [
            (70.0, 70.0, EfficiencyTier.GOOD),
            (70.2, 70.0, EfficiencyTier.EXCELLENT),
            (50.0, 50.0, EfficiencyTier.FAIR),
            (30.0, 30.0, EfficiencyTier.POOR),
            (None, 50.0, EfficiencyTier.NO_METRICS),
        ],
    )
    def test_efficiency_thresholds_are_strict(self, cpu, memory, expected):
        assert CostEstimator().efficiency(cpu, memory) == expected

    def test_custom_price_table(self, make_node):
        pricing = PricingConfig(hourly_prices={"default": 1.0})
        analysis = CostEstimator(pricing=pricing).analyze(
            ClusterSnapshot(nodes=[make_node(instance_type="m5.large")])
        )

        assert analysis.total_monthly_cost == pytest.approx(720.0)


class TestNamespaceCosts:
    def test_namespace_costs_sorted(self, sample_snapshot):
        """Test namespaces are priced by requests, most expensive first."""
        analysis = CostEstimator().analyze(sample_snapshot)

        assert [ns.name for ns in analysis.namespace_costs] == ["default", "shop"]
        default = analysis.namespace_costs[0]
        assert default.monthly_cost == pytest.approx(25.0)
        assert default.pods_count == 1
        assert default.cost_per_pod == pytest.approx(25.0)
        assert default.cpu_requests == "1.00"
        assert default.memory_requests == "1.0 GiB"

    def test_system_namespaces_excluded(self, make_pod):
        pods = [make_pod(namespace="kube-system"), make_pod(namespace="app")]

        costs = CostEstimator().namespace_costs(pods)

        assert [ns.name for ns in costs] == ["app"]

    def test_exclusion_overridable(self, make_pod):
        pricing = PricingConfig(excluded_namespaces=[])

        costs = CostEstimator(pricing=pricing).namespace_costs([make_pod(namespace="kube-system")])

        assert [ns.name for ns in costs] == ["kube-system"]


class TestUnderutilized:
    def test_waste_and_savings(self, sample_snapshot):
        """Test waste is request minus usage for the idle pod."""
        analysis = CostEstimator().analyze(sample_snapshot)

        [resource] = analysis.underutilized_resources
        assert resource.name == "idle"
        assert resource.cpu_waste_milli == 900
        assert resource.memory_waste_bytes == GIB - 100 * MIB
        assert resource.cpu_waste == "900m"
        assert resource.memory_waste == "924.0 MiB"
        assert resource.estimated_monthly_savings == pytest.approx(0.9 * 20 + 924 / 1024 * 5)
        assert resource.recommendation == "Consider reducing requests by 30-50%"

    def test_aggressive_recommendation(self, make_pod, make_container):
        """Test both below 10% recommends a larger cut."""
        pod = make_pod(containers=[make_container(cpu_request=1000, memory_request=GIB)])
        snapshot = ClusterSnapshot(
            pods=[pod],
            pod_usage=[
                UsageSample(name=pod.name, namespace=pod.namespace, cpu_milli=50, memory_bytes=MIB)
            ],
        )

        [resource] = CostEstimator().analyze(snapshot).underutilized_resources

        assert resource.recommendation == "Consider reducing requests by 50-70%"

    def test_pods_without_requests_excluded(self, make_pod, make_container):
        pod = make_pod(containers=[make_container(cpu_request=None, memory_request=GIB)])
        snapshot = ClusterSnapshot(
            pods=[pod],
            pod_usage=[UsageSample(name=pod.name, namespace=pod.namespace, cpu_milli=1)],
        )

        assert CostEstimator().analyze(snapshot).underutilized_resources == []

    def test_one_low_resource_is_not_enough(self, make_pod, make_container):
        """Test both CPU and memory must be below the threshold."""
        pod = make_pod(containers=[make_container(cpu_request=1000, memory_request=GIB)])
        snapshot = ClusterSnapshot(
            pods=[pod],
            pod_usage=[
                UsageSample(
                    name=pod.name, namespace=pod.namespace, cpu_milli=10, memory_bytes=GIB // 2
                )
            ],
        )

        assert CostEstimator().analyze(snapshot).underutilized_resources == []


class TestOptimizations:
    def test_sample_cluster_optimizations(self, sample_snapshot):
        """Test consolidation of the idle node and the monitoring reminder."""
        optimizations = CostEstimator().analyze(sample_snapshot).cost_optimizations

        assert [o.type for o in optimizations] == ["Node Consolidation", "Monitoring"]
        consolidation = optimizations[0]
        assert consolidation.priority == Priority.MEDIUM
        assert consolidation.potential_savings == pytest.approx(0.0416 * 720 * 0.7)
        assert optimizations[-1].priority == Priority.LOW

    def test_rightsizing_above_threshold(self, make_pod, make_container):
        """Test large waste triggers a high priority rightsizing action."""
        pods = [
            make_pod(
                name=f"big-{i}",
                containers=[make_container(cpu_request=4000, memory_request=8 * GIB)],
            )
            for i in range(2)
        ]
        snapshot = ClusterSnapshot(
            pods=pods,
            pod_usage=[
                UsageSample(name=p.name, namespace=p.namespace, cpu_milli=10, memory_bytes=MIB)
                for p in pods
            ],
        )

        optimizations = CostEstimator().analyze(snapshot).cost_optimizations

        assert optimizations[0].type == "Resource Rightsizing"
        assert optimizations[0].priority == Priority.HIGH
        assert optimizations[0].potential_savings > 50
        # The namespace requests 8 cores and 16 GiB
        assert "Namespace Optimization" in [o.type for o in optimizations]

    def test_single_node_never_consolidated(self, make_node):
        snapshot = ClusterSnapshot(
            nodes=[make_node()],
            node_usage=[UsageSample(name="node-1", cpu_milli=1, memory_bytes=1)],
        )

        optimizations = CostEstimator().analyze(snapshot).cost_optimizations

        assert [o.type for o in optimizations] == ["Monitoring"]

    def test_thresholds_are_injected(self, sample_snapshot):
        thresholds = CostThresholds(idle_node_percent=5)

        optimizations = CostEstimator(thresholds=thresholds).analyze(sample_snapshot).cost_optimizations

        assert [o.type for o in optimizations] == ["Monitoring"]
