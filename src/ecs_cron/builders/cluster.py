# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Compute cluster resolver.

An empty cluster name declares a new cluster named after the task. A
non-empty name is looked up by the engine; a missing cluster fails at
reconciliation, not here.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Tuple

from ecs_cron.schemas import Existing, JobParams, New, Resolved, Resource, get_att, sub


CLUSTER_ID = "Cluster"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterRef:
    """The single cluster identity consumed by scheduling and failure watch."""
    resolved: Resolved
    arn: Any  # intrinsic expression

    @property
    def name(self) -> str:
        return self.resolved.name

    @property
    def is_new(self) -> bool:
        return isinstance(self.resolved, New)


def cluster_arn_for(name: str) -> Any:
    """ARN expression for a cluster that already exists in this account."""
    return sub(f"arn:${{AWS::Partition}}:ecs:${{AWS::Region}}:${{AWS::AccountId}}:cluster/{name}")


def resolve_cluster(params: JobParams) -> Tuple[ClusterRef, List[Resource]]:
    """Resolve the cluster reference, declaring a cluster when none is named."""
    if params.ecs_cluster_name:
        logger.debug(f"Using existing cluster {params.ecs_cluster_name}")
        cluster = ClusterRef(
            resolved=Existing(name=params.ecs_cluster_name),
            arn=cluster_arn_for(params.ecs_cluster_name),
        )
        return cluster, []

    logger.debug(f"Declaring new cluster {params.task_name}")
    resource = Resource(
        logical_id=CLUSTER_ID,
        type="AWS::ECS::Cluster",
        properties={"ClusterName": params.task_name},
    )
    cluster = ClusterRef(
        resolved=New(logical_id=CLUSTER_ID, name=params.task_name),
        arn=get_att(CLUSTER_ID, "Arn"),
    )
    return cluster, [resource]
