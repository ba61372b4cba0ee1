# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""ecs-cron schemas."""

from ecs_cron.schemas.params import JobParams
from ecs_cron.schemas.plan import (
    Existing,
    New,
    Plan,
    Resolved,
    Resource,
    get_att,
    ref,
    sub,
)

__all__ = [
    "JobParams",
    "Existing",
    "New",
    "Plan",
    "Resolved",
    "Resource",
    "get_att",
    "ref",
    "sub",
]
