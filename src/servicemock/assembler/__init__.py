"""
Instance assembly.

Builds services under test with mocked collaborators: argument lists for
constructors and injection methods, full instances, and partial doubles.
"""

from servicemock.assembler.arguments import (
    CallArguments,
    ParameterListBuilder,
    ResolvedParameter,
)
from servicemock.assembler.events import EventEmitter
from servicemock.assembler.orchestrator import ServiceMocker

__all__ = [
    "CallArguments",
    "EventEmitter",
    "ParameterListBuilder",
    "ResolvedParameter",
    "ServiceMocker",
]
