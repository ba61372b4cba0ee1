# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""ecs-cron: compile a scheduled ECS job into a CloudFormation plan."""

__version__ = "0.1.0"
