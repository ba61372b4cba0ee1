# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Input parameters for a scheduled ECS job.

JobParams is the single input to the compiler. Every field maps to one
template input; required fields have no default.
"""

import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ecs_cron.errors import ParamError


REQUIRED_STRINGS = (
    "ecr_repo_name",
    "image_tag",
    "task_name",
    "cloudwatch_schedule_expression",
)

# rate(<value> <unit>): value 1 takes the singular unit, anything else plural
RATE_PATTERN = re.compile(r"^rate\((\d+) (minute|minutes|hour|hours|day|days)\)$")
CRON_PATTERN = re.compile(r"^cron\((.+)\)$")
CRON_FIELD_COUNT = 6

# Family and cluster names share the ECS naming rule
NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,255}$")

# IAM role names; also keeps ${ out of Fn::Sub templates
ROLE_NAME_PATTERN = re.compile(r"^[\w+=,.@-]{1,64}$", re.ASCII)


@dataclass(frozen=True)
class JobParams:
    """Validated inputs for one scheduled job.

    Required fields:
    - ecr_repo_name: ECR repository holding the image
    - image_tag: image version to run
    - task_name: naming key for every derived resource
    - cloudwatch_schedule_expression: cron(...) or rate(...) trigger
    - subnet_ids: subnets task runs are placed in

    Optional fields:
    - ecs_cluster_name: existing cluster to run on ("" creates one)
    - task_cpu: CPU share units (1024 per vCPU)
    - task_memory: memory in MiB
    - extra_container_defs: additive container definition overlay
    - task_role_arn: role assumed by the application code
    - ecs_task_execution_role_name: existing execution role to reuse
    - assign_public_ip: give task ENIs a public address
    """

    ecr_repo_name: str
    image_tag: str
    task_name: str
    cloudwatch_schedule_expression: str
    subnet_ids: Tuple[str, ...]
    ecs_cluster_name: str = ""
    task_cpu: int = 1024
    task_memory: int = 2048
    extra_container_defs: Mapping[str, Any] = field(default_factory=dict)
    task_role_arn: Optional[str] = None
    ecs_task_execution_role_name: str = ""
    assign_public_ip: bool = False

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobParams":
        """Build JobParams from a plain mapping, validating every field.

        Raises:
            ParamError: On unknown keys, missing required keys, or bad values.
        """
        known = set(cls.field_names())
        unknown = sorted(k for k in data if k not in known)
        if unknown:
            raise ParamError(f"Unknown parameters: {', '.join(unknown)}")

        missing = [
            name for name in (*REQUIRED_STRINGS, "subnet_ids")
            if data.get(name) is None
        ]
        if missing:
            raise ParamError(f"Missing required parameters: {', '.join(missing)}")

        values = dict(data)
        # YAML and key=value parsing turn tags like 20240101 into numbers
        for name in string_fields():
            value = values.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                values[name] = str(value)

        subnets = values["subnet_ids"]
        if isinstance(subnets, str) or not isinstance(subnets, (list, tuple)):
            raise ParamError("subnet_ids must be a list of strings")
        values["subnet_ids"] = tuple(subnets)

        extra = values.get("extra_container_defs")
        if extra is None:
            values["extra_container_defs"] = {}

        for name in ("ecs_cluster_name", "ecs_task_execution_role_name"):
            if values.get(name) is None:
                values[name] = ""

        params = cls(**values)
        params.validate()
        return params

    def validate(self) -> None:
        """Validate field values.

        Raises:
            ParamError: If validation fails.
        """
        for name in REQUIRED_STRINGS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ParamError(f"{name} is required and must be a non-empty string")

        if not NAME_PATTERN.match(self.task_name):
            raise ParamError(
                f"task_name must be letters, digits, hyphens or underscores, got: {self.task_name}"
            )

        validate_schedule_expression(self.cloudwatch_schedule_expression)

        if not self.subnet_ids:
            raise ParamError("subnet_ids must contain at least one subnet")
        for subnet in self.subnet_ids:
            if not isinstance(subnet, str) or not subnet:
                raise ParamError(f"subnet_ids entries must be non-empty strings, got: {subnet!r}")

        if not isinstance(self.ecs_cluster_name, str):
            raise ParamError("ecs_cluster_name must be a string")
        if self.ecs_cluster_name and not NAME_PATTERN.match(self.ecs_cluster_name):
            raise ParamError(f"invalid ecs_cluster_name: {self.ecs_cluster_name}")

        for name in ("task_cpu", "task_memory"):
            value = getattr(self, name)
            # bool is an int subclass
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ParamError(f"{name} must be a positive integer, got: {value!r}")

        if not isinstance(self.extra_container_defs, dict):
            raise ParamError("extra_container_defs must be a mapping")

        if self.task_role_arn is not None:
            if not isinstance(self.task_role_arn, str) or not self.task_role_arn.startswith("arn:"):
                raise ParamError(f"task_role_arn must be an ARN, got: {self.task_role_arn!r}")

        if not isinstance(self.ecs_task_execution_role_name, str):
            raise ParamError("ecs_task_execution_role_name must be a string")
        role_name = self.ecs_task_execution_role_name
        if role_name and not ROLE_NAME_PATTERN.match(role_name):
            raise ParamError(f"invalid ecs_task_execution_role_name: {role_name}")

        if not isinstance(self.assign_public_ip, bool):
            raise ParamError("assign_public_ip must be true or false")

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain, serializable view of the parameters."""
        data = {name: getattr(self, name) for name in self.field_names()}
        data["subnet_ids"] = list(self.subnet_ids)
        data["extra_container_defs"] = dict(self.extra_container_defs)
        return data


def string_fields() -> Tuple[str, ...]:
    """Names of the str and Optional[str] inputs."""
    return tuple(
        f.name for f in fields(JobParams)
        if f.type in (str, Optional[str])
    )


def validate_schedule_expression(expression: str) -> None:
    """Reject schedule expressions EventBridge would refuse.

    Accepts rate(<n> <unit>) with singular units only for 1, and cron(...)
    with exactly six space-separated fields.
    """
    rate = RATE_PATTERN.match(expression)
    if rate:
        value, unit = int(rate.group(1)), rate.group(2)
        if value <= 0:
            raise ParamError(f"rate value must be positive: {expression}")
        if (value == 1) != (not unit.endswith("s")):
            raise ParamError(f"rate unit must be singular only for a value of 1: {expression}")
        return

    cron = CRON_PATTERN.match(expression)
    if cron:
        parts = cron.group(1).split()
        if len(parts) != CRON_FIELD_COUNT:
            raise ParamError(
                f"cron expression needs {CRON_FIELD_COUNT} fields, got {len(parts)}: {expression}"
            )
        return

    raise ParamError(f"schedule expression must be cron(...) or rate(...): {expression}")
