"""
servicemock: build services under test with every dependency mocked.
"""

from servicemock.assembler.orchestrator import ServiceMocker
from servicemock.errors import (
    InvalidClassError,
    MissingRequiredValueError,
    MissingTypeDeclarationError,
    ServiceMockError,
    UnknownMethodError,
    UnregisteredMockError,
    UnsupportedUnionTypeError,
)
from servicemock.markers import SupportsInjection, required
from servicemock.testing.helper import ServiceMockHelper

__version__ = "1.0.0"

__all__ = [
    "InvalidClassError",
    "MissingRequiredValueError",
    "MissingTypeDeclarationError",
    "ServiceMockError",
    "ServiceMockHelper",
    "ServiceMocker",
    "SupportsInjection",
    "UnknownMethodError",
    "UnregisteredMockError",
    "UnsupportedUnionTypeError",
    "required",
]
