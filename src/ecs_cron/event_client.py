# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Compile audit log for ecs-cron.

One JSON line per `plan` invocation:
- plan.compiled: job name, declared resources, which identities were
  created versus looked up, and the outputs handed to callers
- plan.failed: the error class and message

Lines from one invocation share a correlation id.
"""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ecs_cron.builders.cluster import CLUSTER_ID
from ecs_cron.builders.iam import EXECUTION_ROLE_ID
from ecs_cron.schemas import Plan


COMPILED = "plan.compiled"
FAILED = "plan.failed"


class CompileEventLog:
    """Append-only JSONL record of plan compilations."""

    def __init__(self, log_path: Path, correlation_id: Optional[str] = None):
        self.log_path = log_path
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log_compile(self, plan: Plan) -> Dict[str, Any]:
        """Record a successful compile and return the written entry."""
        return self._append({
            "event_type": COMPILED,
            "job_name": plan.job_name,
            "resources": {r.logical_id: r.type for r in plan.resources},
            "reused": _reused_identities(plan),
            "outputs": sorted(plan.outputs),
        })

    def log_failure(self, error: Exception) -> Dict[str, Any]:
        """Record a rejected compile and return the written entry."""
        return self._append({
            "event_type": FAILED,
            "error_type": type(error).__name__,
            "error_message": str(error),
        })

    def entries(self) -> List[Dict[str, Any]]:
        """Every logged entry, oldest first."""
        if not self.log_path.exists():
            return []
        with open(self.log_path) as f:
            return [json.loads(line) for line in f if line.strip()]

    def _append(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "correlation_id": self.correlation_id,
            **entry,
        }
        with open(self.log_path, "a") as f:
            f.write(json.dumps(entry) + "\n")
        return entry


def _reused_identities(plan: Plan) -> List[str]:
    """Identities the plan looks up instead of declaring."""
    reused = []
    if not plan.has(CLUSTER_ID):
        reused.append("cluster")
    if not plan.has(EXECUTION_ROLE_ID):
        reused.append("execution_role")
    return reused
