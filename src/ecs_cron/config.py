# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Parameter file loading for ecs-cron.

A parameters file is a YAML mapping of input names to values. An optional
`defaults:` section is merged underneath the top-level keys, so shared
settings can live in one block:

    defaults:
      task_cpu: 2048
      subnet_ids: [subnet-a, subnet-b]
    task_name: etl-job
    ...
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ecs_cron.errors import ParamError


EVENT_LOG_ENV = "ECS_CRON_EVENT_LOG"


def load_params_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a parameters YAML file; no path means no file values."""
    if not path:
        return {}
    params_path = Path(path).expanduser()
    if not params_path.exists():
        raise FileNotFoundError(f"Parameters file not found: {params_path}")

    try:
        data = yaml.safe_load(params_path.read_text())
    except yaml.YAMLError as e:
        raise ParamError(f"Invalid YAML in {params_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParamError(f"Parameters file must contain a mapping: {params_path}")

    defaults = data.pop("defaults", None) or {}
    if not isinstance(defaults, dict):
        raise ParamError("'defaults' must be a mapping")
    return {**defaults, **data}


def merge_params(file_values: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Command-line overrides win over file values."""
    return {**file_values, **overrides}


def default_event_log() -> Optional[Path]:
    """Event log path from the environment, if configured."""
    value = os.environ.get(EVENT_LOG_ENV)
    if not value:
        return None
    return Path(value).expanduser()
