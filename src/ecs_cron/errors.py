# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised while loading parameters and compiling a plan.

Only declaration errors live here. Reconciliation errors (permission denied,
lookup not found) and runtime errors (task crash) belong to CloudFormation
and the ECS platform.
"""


class CompileError(Exception):
    """Raised when a plan cannot be compiled from the given parameters."""
    pass


class ParamError(CompileError):
    """Raised when an input parameter is missing or malformed."""
    pass
