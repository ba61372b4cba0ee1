# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Resource builders, one per resource group.

Each builder maps JobParams (plus references produced by earlier builders)
to Resource records. Builders never talk to AWS.
"""

from ecs_cron.builders.cluster import ClusterRef, resolve_cluster
from ecs_cron.builders.iam import (
    ExecutionRoleRef,
    build_logging_policy,
    build_trigger_role,
    resolve_execution_role,
)
from ecs_cron.builders.schedule import (
    build_failure_rule,
    build_failure_topic,
    build_schedule_rule,
    build_topic_policy,
)
from ecs_cron.builders.task import (
    ContainerOverlay,
    ContainerSpec,
    build_container_definition,
    build_task_definition,
)

__all__ = [
    "ClusterRef",
    "resolve_cluster",
    "ExecutionRoleRef",
    "resolve_execution_role",
    "build_logging_policy",
    "build_trigger_role",
    "build_schedule_rule",
    "build_failure_topic",
    "build_failure_rule",
    "build_topic_policy",
    "ContainerOverlay",
    "ContainerSpec",
    "build_container_definition",
    "build_task_definition",
]
