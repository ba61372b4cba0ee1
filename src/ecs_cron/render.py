# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Render a compiled Plan.

Formats:
- json: CloudFormation template
- yaml: the same template as YAML
- table: one row per resource, then the outputs
"""

import json
from typing import Any, Dict, List

import yaml

from ecs_cron.schemas import Plan, Resource


TEMPLATE_VERSION = "2010-09-09"
FORMATS = ("json", "yaml", "table")

# Property holding the physical name, per resource type
NAME_PROPERTIES = {
    "AWS::ECS::Cluster": "ClusterName",
    "AWS::ECS::TaskDefinition": "Family",
    "AWS::IAM::Role": "RoleName",
    "AWS::IAM::Policy": "PolicyName",
    "AWS::Events::Rule": "Name",
    "AWS::SNS::Topic": "TopicName",
}


def to_template(plan: Plan) -> Dict[str, Any]:
    """Build the CloudFormation template for a plan."""
    return {
        "AWSTemplateFormatVersion": TEMPLATE_VERSION,
        "Description": plan.description,
        "Resources": {r.logical_id: r.to_dict() for r in plan.resources},
        "Outputs": {
            name: {"Description": f"{name} for {plan.job_name}", "Value": value}
            for name, value in plan.outputs.items()
        },
    }


def render_plan(plan: Plan, format_type: str = "json") -> str:
    """Render a plan in the given format."""
    if format_type == "json":
        return json.dumps(to_template(plan), indent=2)
    elif format_type == "yaml":
        return yaml.safe_dump(to_template(plan), sort_keys=False, default_flow_style=False)
    elif format_type == "table":
        return _render_table(_plan_rows(plan)) + "\n\n" + _render_outputs(plan)
    else:
        raise ValueError(f"Unknown format: {format_type} (expected one of {', '.join(FORMATS)})")


def physical_name(resource: Resource) -> str:
    key = NAME_PROPERTIES.get(resource.type)
    if key is None:
        return "-"
    value = resource.properties.get(key)
    return value if isinstance(value, str) else "-"


def _plan_rows(plan: Plan) -> List[Dict[str, str]]:
    return [
        {"logical_id": r.logical_id, "type": r.type, "name": physical_name(r)}
        for r in plan.resources
    ]


def _render_table(rows: List[Dict[str, str]]) -> str:
    """Render rows as a simple table."""
    if not rows:
        return "(no resources)"
    keys = list(rows[0].keys())
    widths = {k: max(len(str(k)), max(len(str(r.get(k, ""))) for r in rows)) for k in keys}
    header = " | ".join(str(k).ljust(widths[k]) for k in keys)
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append(" | ".join(str(row.get(k, "")).ljust(widths[k]) for k in keys).rstrip())
    return "\n".join(lines)


def _render_outputs(plan: Plan) -> str:
    lines = ["Outputs:"]
    for name, value in plan.outputs.items():
        lines.append(f"  {name}: {json.dumps(value)}")
    return "\n".join(lines)
