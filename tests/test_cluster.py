# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Tests for the cluster resolver."""

from ecs_cron.builders.cluster import CLUSTER_ID, resolve_cluster
from ecs_cron.schemas import Existing, New


class TestResolveCluster:
    """Create-or-lookup selection."""

    def test_empty_name_declares_cluster(self, params):
        """No cluster name: exactly one cluster named after the task."""
        cluster, resources = resolve_cluster(params)

        assert len(resources) == 1
        assert resources[0].type == "AWS::ECS::Cluster"
        assert resources[0].properties == {"ClusterName": "etl-job"}
        assert cluster.resolved == New(logical_id=CLUSTER_ID, name="etl-job")
        assert cluster.is_new is True

    def test_new_cluster_arn_is_attribute(self, params):
        cluster, _ = resolve_cluster(params)
        assert cluster.arn == {"Fn::GetAtt": [CLUSTER_ID, "Arn"]}

    def test_existing_name_declares_nothing(self, make_params):
        """A cluster name means a lookup and zero declared clusters."""
        cluster, resources = resolve_cluster(make_params(ecs_cluster_name="shared"))

        assert resources == []
        assert cluster.resolved == Existing(name="shared")
        assert cluster.is_new is False
        assert cluster.name == "shared"

    def test_existing_arn_built_from_name(self, make_params):
        cluster, _ = resolve_cluster(make_params(ecs_cluster_name="shared"))

        assert cluster.arn == {
            "Fn::Sub": "arn:${AWS::Partition}:ecs:${AWS::Region}:${AWS::AccountId}:cluster/shared"
        }
