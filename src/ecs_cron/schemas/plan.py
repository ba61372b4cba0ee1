# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Plan schemas for ecs-cron.

Follows the compile pattern:
- JobParams -> compile -> Plan -> render -> CloudFormation template
- References between resources are CloudFormation intrinsics, resolved by
  the engine at reconciliation time
- Create-or-lookup choices are resolved once into New | Existing
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union


# =============================================================================
# Intrinsic functions
# =============================================================================

def ref(logical_id: str) -> Dict[str, str]:
    """Reference a resource or pseudo parameter."""
    return {"Ref": logical_id}


def get_att(logical_id: str, attribute: str) -> Dict[str, List[str]]:
    """Reference an attribute of a declared resource."""
    return {"Fn::GetAtt": [logical_id, attribute]}


def sub(template: str) -> Dict[str, str]:
    """Substitute ${AWS::*} pseudo parameters and ${LogicalId} refs."""
    return {"Fn::Sub": template}


# =============================================================================
# Create-or-lookup variant
# =============================================================================

@dataclass(frozen=True)
class New:
    """A resource this plan declares and owns."""
    logical_id: str
    name: str


@dataclass(frozen=True)
class Existing:
    """A resource looked up by name; the plan never owns its lifecycle."""
    name: str


Resolved = Union[New, Existing]


# =============================================================================
# Resources
# =============================================================================

@dataclass(frozen=True)
class Resource:
    """One declared resource record."""
    logical_id: str
    type: str  # e.g., "AWS::ECS::Cluster"
    properties: Dict[str, Any] = field(default_factory=dict)
    depends_on: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"Type": self.type, "Properties": self.properties}
        if self.depends_on:
            body["DependsOn"] = list(self.depends_on)
        return body


@dataclass(frozen=True)
class Plan:
    """A compiled deployment plan.

    Resources keep declaration order. Outputs map an output name to its
    value expression.
    """
    job_name: str
    description: str
    resources: Tuple[Resource, ...]
    outputs: Dict[str, Any] = field(default_factory=dict)
    params: Optional[Dict[str, Any]] = None

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)

    def logical_ids(self) -> List[str]:
        return [r.logical_id for r in self.resources]

    def get(self, logical_id: str) -> Resource:
        for resource in self.resources:
            if resource.logical_id == logical_id:
                return resource
        raise KeyError(logical_id)

    def has(self, logical_id: str) -> bool:
        return any(r.logical_id == logical_id for r in self.resources)

    def of_type(self, resource_type: str) -> List[Resource]:
        return [r for r in self.resources if r.type == resource_type]
