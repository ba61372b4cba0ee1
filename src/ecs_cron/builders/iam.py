# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Access policy builder.

Two identities:
- Execution role: assumed by ECS to pull the image and ship logs
- Trigger role: assumed by EventBridge to launch the task

When ecs_task_execution_role_name is set no execution role is declared and
the logging policy is attached to the existing role by name. That mutates an
identity outside this plan: two deployments sharing the role name and task
name write the same inline policy, and the last one applied wins.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from ecs_cron.schemas import Existing, JobParams, New, Resolved, Resource, get_att, ref, sub


EXECUTION_ROLE_ID = "ExecutionRole"
LOGGING_POLICY_ID = "ExecutionLoggingPolicy"
TRIGGER_ROLE_ID = "TriggerRole"

EXECUTION_PRINCIPAL = "ecs-tasks.amazonaws.com"
TRIGGER_PRINCIPAL = "events.amazonaws.com"

EXECUTION_MANAGED_POLICY = (
    "arn:${AWS::Partition}:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"
)

POLICY_VERSION = "2012-10-17"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionRoleRef:
    """Resolved execution role: the name policies attach to and its ARN."""
    resolved: Resolved
    role_name: Any  # literal name or Ref to the declared role
    arn: Any

    @property
    def is_new(self) -> bool:
        return isinstance(self.resolved, New)


def assume_role_policy(principal: str) -> Dict[str, Any]:
    """Trust policy letting one AWS service principal assume the role."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": principal},
                "Action": "sts:AssumeRole",
            }
        ],
    }


def role_arn_for(name: str) -> Any:
    """ARN expression for a role that already exists in this account."""
    return sub(f"arn:${{AWS::Partition}}:iam::${{AWS::AccountId}}:role/{name}")


def resolve_execution_role(params: JobParams) -> Tuple[ExecutionRoleRef, List[Resource]]:
    """Resolve the execution role, declaring one unless an override is named."""
    override = params.ecs_task_execution_role_name
    if override:
        logger.warning(
            f"Attaching logging policy to existing role '{override}'; "
            "other deployments using this role share the attachment"
        )
        role = ExecutionRoleRef(
            resolved=Existing(name=override),
            role_name=override,
            arn=role_arn_for(override),
        )
        return role, []

    name = f"{params.task_name}-execution"
    resource = Resource(
        logical_id=EXECUTION_ROLE_ID,
        type="AWS::IAM::Role",
        properties={
            "RoleName": name,
            "AssumeRolePolicyDocument": assume_role_policy(EXECUTION_PRINCIPAL),
            "ManagedPolicyArns": [sub(EXECUTION_MANAGED_POLICY)],
        },
    )
    role = ExecutionRoleRef(
        resolved=New(logical_id=EXECUTION_ROLE_ID, name=name),
        role_name=ref(EXECUTION_ROLE_ID),
        arn=get_att(EXECUTION_ROLE_ID, "Arn"),
    )
    return role, [resource]


def build_logging_policy(params: JobParams, execution_role: ExecutionRoleRef) -> Resource:
    """Let the execution role create the job's log group.

    Both log group ARN forms are listed: the bare one and the :* form that
    covers the group's streams.
    """
    log_group = (
        "arn:${AWS::Partition}:logs:${AWS::Region}:${AWS::AccountId}:"
        f"log-group:{params.task_name}"
    )
    log_group_arns = [sub(log_group), sub(f"{log_group}:*")]
    return Resource(
        logical_id=LOGGING_POLICY_ID,
        type="AWS::IAM::Policy",
        properties={
            "PolicyName": f"{params.task_name}-logging",
            "Roles": [execution_role.role_name],
            "PolicyDocument": {
                "Version": POLICY_VERSION,
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Action": ["logs:CreateLogGroup"],
                        "Resource": log_group_arns,
                    }
                ],
            },
        },
    )


def pass_role_targets(params: JobParams, execution_role: ExecutionRoleRef) -> List[Any]:
    """Roles the trigger may pass: the execution role, plus the task role if set."""
    targets = [execution_role.arn]
    if params.task_role_arn is not None:
        targets.append(params.task_role_arn)
    return targets


def build_trigger_role(
    params: JobParams,
    execution_role: ExecutionRoleRef,
    task_definition_arn: Any,
    cluster_arn: Any,
) -> Resource:
    """
    Build the role EventBridge assumes to launch the task.

    Grants ecs:RunTask on this job's task definition only, on this job's
    cluster only, and iam:PassRole on exactly the roles the task needs.
    """
    return Resource(
        logical_id=TRIGGER_ROLE_ID,
        type="AWS::IAM::Role",
        properties={
            "RoleName": f"{params.task_name}-trigger",
            "AssumeRolePolicyDocument": assume_role_policy(TRIGGER_PRINCIPAL),
            "Policies": [
                {
                    "PolicyName": f"{params.task_name}-run-task",
                    "PolicyDocument": {
                        "Version": POLICY_VERSION,
                        "Statement": [
                            {
                                "Effect": "Allow",
                                "Action": ["ecs:RunTask"],
                                "Resource": [task_definition_arn],
                                "Condition": {"ArnEquals": {"ecs:cluster": cluster_arn}},
                            },
                            {
                                "Effect": "Allow",
                                "Action": ["iam:PassRole"],
                                "Resource": pass_role_targets(params, execution_role),
                            },
                        ],
                    },
                }
            ],
        },
    )
