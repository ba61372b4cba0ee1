# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Task template builder.

Produces exactly one container definition and the task definition that
carries it. The container definition is built in two layers:

- ContainerSpec: the required fields, always present
- ContainerOverlay: caller-supplied additive keys, shallow-merged on top

Overlay precedence: caller keys win over image, cpu, memoryReservation and
essential. name and logConfiguration are reserved and cannot be overlaid,
so the log group always matches the task name.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from ecs_cron.errors import CompileError
from ecs_cron.schemas import JobParams, Resource, ref, sub


TASK_DEFINITION_ID = "TaskDefinition"

# Raw CPU shares per whole unit handed to the container definition
CPU_UNITS_PER_VCPU = 1024

RESERVED_KEYS = frozenset({"name", "logConfiguration"})

logger = logging.getLogger(__name__)


def image_uri(params: JobParams) -> Any:
    """ECR image reference for the configured repository and tag."""
    return sub(
        "${AWS::AccountId}.dkr.ecr.${AWS::Region}.${AWS::URLSuffix}/"
        f"{params.ecr_repo_name}:{params.image_tag}"
    )


def cpu_units(task_cpu: int) -> int:
    """Scale raw CPU shares to whole units, truncating (1536 -> 1)."""
    return task_cpu // CPU_UNITS_PER_VCPU


def log_configuration(task_name: str) -> Dict[str, Any]:
    """awslogs routing to a log group named after the task."""
    return {
        "logDriver": "awslogs",
        "options": {
            "awslogs-group": task_name,
            "awslogs-region": ref("AWS::Region"),
            "awslogs-stream-prefix": task_name,
            "awslogs-create-group": "true",
        },
    }


@dataclass(frozen=True)
class ContainerSpec:
    """Required container fields; the base layer of every definition."""
    name: str
    image: Any
    cpu: int
    memory_reservation: int
    log_configuration: Dict[str, Any]
    essential: bool = True

    @classmethod
    def from_params(cls, params: JobParams) -> "ContainerSpec":
        return cls(
            name=params.task_name,
            image=image_uri(params),
            cpu=cpu_units(params.task_cpu),
            memory_reservation=params.task_memory,
            log_configuration=log_configuration(params.task_name),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "image": self.image,
            "cpu": self.cpu,
            "memoryReservation": self.memory_reservation,
            "essential": self.essential,
            "logConfiguration": self.log_configuration,
        }


@dataclass(frozen=True)
class ContainerOverlay:
    """Validated additive keys for the container definition."""
    fields: Mapping[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Reject reserved or malformed keys.

        Raises:
            CompileError: If a key is reserved, empty, or not a string.
        """
        for key in self.fields:
            if not isinstance(key, str) or not key:
                raise CompileError(f"extra_container_defs keys must be non-empty strings, got: {key!r}")
        reserved = sorted(RESERVED_KEYS.intersection(self.fields))
        if reserved:
            raise CompileError(
                f"extra_container_defs may not override reserved keys: {', '.join(reserved)}"
            )

    def apply(self, base: ContainerSpec) -> Dict[str, Any]:
        """Shallow-merge the overlay on top of the base spec."""
        self.validate()
        merged = base.to_dict()
        for key, value in self.fields.items():
            if key in merged:
                logger.debug(f"Container key '{key}' overridden by extra_container_defs")
            merged[key] = value
        return merged


def build_container_definition(params: JobParams) -> Dict[str, Any]:
    """Merge the caller's overlay onto the required container fields."""
    base = ContainerSpec.from_params(params)
    overlay = ContainerOverlay(fields=dict(params.extra_container_defs))
    return overlay.apply(base)


def build_task_definition(params: JobParams, execution_role_arn: Any) -> Resource:
    """
    Build the Fargate task definition.

    Args:
        params: Validated job parameters
        execution_role_arn: ARN expression of the resolved execution role

    Returns:
        Resource for AWS::ECS::TaskDefinition
    """
    properties: Dict[str, Any] = {
        "Family": params.task_name,
        "RequiresCompatibilities": ["FARGATE"],
        "NetworkMode": "awsvpc",
        "Cpu": str(params.task_cpu),
        "Memory": str(params.task_memory),
        "ExecutionRoleArn": execution_role_arn,
        "ContainerDefinitions": [build_container_definition(params)],
    }
    if params.task_role_arn is not None:
        properties["TaskRoleArn"] = params.task_role_arn

    return Resource(
        logical_id=TASK_DEFINITION_ID,
        type="AWS::ECS::TaskDefinition",
        properties=properties,
    )
