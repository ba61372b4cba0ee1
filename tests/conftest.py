# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for ecs-cron tests."""

import pytest

from ecs_cron.schemas import JobParams


@pytest.fixture
def raw_params() -> dict:
    """Minimal valid parameter mapping."""
    return {
        "ecr_repo_name": "etl",
        "image_tag": "v1.2.3",
        "task_name": "etl-job",
        "cloudwatch_schedule_expression": "rate(1 hour)",
        "subnet_ids": ["subnet-aaa", "subnet-bbb"],
    }


@pytest.fixture
def make_params(raw_params):
    """Factory for JobParams with selected fields replaced."""
    def _make(**overrides) -> JobParams:
        return JobParams.from_dict({**raw_params, **overrides})
    return _make


@pytest.fixture
def params(make_params) -> JobParams:
    return make_params()
