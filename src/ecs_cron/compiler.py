# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Compiler - Transform JobParams into a Plan.

Single pass, in dependency order:
- cluster (new or existing)
- execution role (new or existing) and its logging policy
- task definition
- trigger role
- schedule rule
- failure topic, failure rule, topic policy

References between resources stay as CloudFormation intrinsics; the engine
resolves them at reconciliation time.
"""

import logging
from typing import Any, Dict, List

from ecs_cron.builders import (
    build_failure_rule,
    build_failure_topic,
    build_logging_policy,
    build_schedule_rule,
    build_task_definition,
    build_topic_policy,
    build_trigger_role,
    resolve_cluster,
    resolve_execution_role,
)
from ecs_cron.builders.iam import TRIGGER_ROLE_ID
from ecs_cron.builders.schedule import topic_arn
from ecs_cron.builders.task import TASK_DEFINITION_ID
from ecs_cron.errors import CompileError, ParamError
from ecs_cron.schemas import JobParams, Plan, Resource, get_att, ref


TOPIC_OUTPUT = "TopicArn"

logger = logging.getLogger(__name__)


def compile_params(data: Dict[str, Any]) -> Plan:
    """Validate a raw parameter mapping and compile it."""
    return compile_plan(JobParams.from_dict(data))


def compile_plan(params: JobParams) -> Plan:
    """
    Compile JobParams -> Plan.

    Args:
        params: Validated job parameters

    Returns:
        Plan with resources in declaration order and the TopicArn output

    Raises:
        CompileError: If a builder rejects the parameters
    """
    resources: List[Resource] = []

    cluster, cluster_resources = resolve_cluster(params)
    resources.extend(cluster_resources)

    execution_role, role_resources = resolve_execution_role(params)
    resources.extend(role_resources)
    resources.append(build_logging_policy(params, execution_role))

    resources.append(build_task_definition(params, execution_role.arn))
    task_definition_arn = ref(TASK_DEFINITION_ID)

    resources.append(
        build_trigger_role(params, execution_role, task_definition_arn, cluster.arn)
    )
    resources.append(
        build_schedule_rule(
            params,
            cluster_arn=cluster.arn,
            task_definition_arn=task_definition_arn,
            trigger_role_arn=get_att(TRIGGER_ROLE_ID, "Arn"),
        )
    )

    resources.append(build_failure_topic(params))
    resources.append(
        build_failure_rule(params, cluster.arn, task_definition_arn, topic_arn())
    )
    resources.append(build_topic_policy(topic_arn()))

    _check_unique_ids(resources)

    plan = Plan(
        job_name=params.task_name,
        description=f"Scheduled ECS task {params.task_name} with failure notifications",
        resources=tuple(resources),
        outputs={TOPIC_OUTPUT: topic_arn()},
        params=params.to_dict(),
    )
    logger.info(
        f"Compiled plan for {params.task_name}: {len(plan)} resources "
        f"(cluster {'new' if cluster.is_new else 'existing'}, "
        f"execution role {'new' if execution_role.is_new else 'existing'})"
    )
    for resource in plan:
        logger.debug(f"  {resource.logical_id}: {resource.type}")
    return plan


def _check_unique_ids(resources: List[Resource]) -> None:
    seen = set()
    for resource in resources:
        if resource.logical_id in seen:
            raise CompileError(f"Duplicate logical id: {resource.logical_id}")
        seen.add(resource.logical_id)


__all__ = ["CompileError", "ParamError", "TOPIC_OUTPUT", "compile_params", "compile_plan"]
