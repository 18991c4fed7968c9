"""
Parameter resolution.

Decides, for one constructor or injection-method parameter, whether the
declared default is used or a mock of the declared type is synthesized.
"""

import logging
from dataclasses import dataclass
from typing import Any

from servicemock.analyzer.reflection import MethodReflection, ParameterReflection
from servicemock.config.models import ServiceMockConfig
from servicemock.errors import (
    MissingRequiredValueError,
    MissingTypeDeclarationError,
    UnsupportedUnionTypeError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterDecision:
    """Either use ``default`` or build a mock of ``mock_type``."""

    mock_type: type | None = None
    default: Any = None

    @property
    def is_mock(self) -> bool:
        return self.mock_type is not None


class ParameterResolver:
    """Turns a parameter's type declaration into a mock-or-default decision."""

    def __init__(self, config: ServiceMockConfig | None = None):
        self.config = config or ServiceMockConfig()

    def resolve(
        self, owner: str, parameter: ParameterReflection, method: MethodReflection
    ) -> ParameterDecision:
        """
        Resolve a single parameter.

        Args:
            owner: Qualified name of the class under construction
            parameter: The reflected parameter
            method: The method the parameter belongs to (for messages)

        Returns:
            ParameterDecision for the parameter

        Raises:
            MissingTypeDeclarationError: No readable annotation
            UnsupportedUnionTypeError: Union of more than one type
            MissingRequiredValueError: Built-in type without a default
        """
        location = f"'{parameter.name}' in {owner}.{method.name}"

        if not parameter.has_type:
            raise MissingTypeDeclarationError(f"Cannot read type of parameter {location}")

        declaration = parameter.type_declaration()
        if declaration.is_union:
            raise UnsupportedUnionTypeError(
                "Creating mocks for more than one type at a time is not supported "
                f"for {location}"
            )

        if declaration.is_builtin(self.config):
            if not parameter.has_default:
                raise MissingRequiredValueError(f"Specify parameter {location}")

            logger.debug(f"Using default {parameter.default!r} for {location}")
            return ParameterDecision(default=parameter.default)

        logger.debug(f"Mocking {declaration.name} for {location}")
        return ParameterDecision(mock_type=declaration.python_type)
