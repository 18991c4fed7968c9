"""
Argument list building.

Merges caller-supplied overrides with resolved defaults and synthesized
mocks into the arguments for one constructor or injection-method call.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from servicemock.analyzer.reflection import MethodReflection, ParameterReflection
from servicemock.analyzer.resolver import ParameterResolver
from servicemock.state.mock_registry import MockRegistry
from servicemock.verifier.mocker import MockFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedParameter:
    """A parameter value and the type it mocks (None for defaults)."""

    value: Any
    mocked_type: type | None = None


@dataclass
class CallArguments:
    """Arguments for one call, in the callable's parameter order."""

    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)
    overridden: set[str] = field(default_factory=set)

    def apply(self, target: Any) -> Any:
        return target(*self.args, **self.kwargs)


class ParameterListBuilder:
    """Builds call arguments and records every synthesized mock."""

    def __init__(
        self,
        resolver: ParameterResolver,
        mock_factory: MockFactory,
        registry: MockRegistry,
    ):
        self.resolver = resolver
        self.mock_factory = mock_factory
        self.registry = registry

    def build(
        self,
        owner: str,
        method: MethodReflection,
        overrides: Mapping[str, Any] | None = None,
    ) -> CallArguments:
        """
        Build the arguments for ``method``.

        An override applies when its key is present, whatever its value
        (None included). Variadic parameters only receive overrides.

        Args:
            owner: Qualified name of the class under construction
            method: Constructor or injection method
            overrides: Parameter name -> explicit value

        Returns:
            CallArguments matching the method's signature
        """
        overrides = overrides or {}
        call = CallArguments()

        for parameter in method.parameters():
            if parameter.name in overrides:
                self._place(call, parameter, overrides[parameter.name])
                call.overridden.add(parameter.name)
                continue

            if parameter.is_variadic:
                continue

            resolved = self.resolve_parameter(owner, parameter, method)
            self._place(call, parameter, resolved.value)

            if resolved.mocked_type is None:
                continue

            self.registry.register(owner, resolved.mocked_type, resolved.value)

        return call

    def resolve_parameter(
        self, owner: str, parameter: ParameterReflection, method: MethodReflection
    ) -> ResolvedParameter:
        """Resolve one parameter and create its mock when one is needed."""
        decision = self.resolver.resolve(owner, parameter, method)
        if not decision.is_mock:
            return ResolvedParameter(decision.default)

        return ResolvedParameter(
            self.mock_factory.create_mock(decision.mock_type),
            decision.mock_type,
        )

    @staticmethod
    def _place(call: CallArguments, parameter: ParameterReflection, value: Any) -> None:
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            call.args.extend(_as_iterable(parameter, value))
        elif parameter.kind == inspect.Parameter.VAR_KEYWORD:
            if not isinstance(value, Mapping):
                raise TypeError(f"Override for **{parameter.name} must be a mapping")
            call.kwargs.update(value)
        elif parameter.kind == inspect.Parameter.KEYWORD_ONLY:
            call.kwargs[parameter.name] = value
        else:
            call.args.append(value)


def _as_iterable(parameter: ParameterReflection, value: Any) -> Iterable[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise TypeError(f"Override for *{parameter.name} must be an iterable of values")
    return value


def warn_unused_overrides(
    owner: str, what: str, overrides: Mapping[str, Any] | None, used: set[str]
) -> None:
    """Log override keys that matched no parameter."""
    unused = sorted(set(overrides or {}) - used)
    if unused:
        logger.warning(f"Unused {what} overrides for {owner}: {', '.join(unused)}")
