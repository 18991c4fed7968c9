"""
Instance assembly.

Builds a real instance of a class with mocked collaborators, or a partial
double of it, runs the injection pass, and keeps every mock it created in the
registry for later retrieval.
"""

import logging
from typing import Any, Iterable, Mapping
from unittest.mock import DEFAULT

from servicemock.analyzer.reflection import ClassReflection
from servicemock.analyzer.resolver import ParameterResolver
from servicemock.assembler.arguments import (
    CallArguments,
    ParameterListBuilder,
    warn_unused_overrides,
)
from servicemock.assembler.events import EventEmitter
from servicemock.config.models import PartialMockCreated, ServiceMockConfig
from servicemock.errors import UnknownMethodError
from servicemock.state.mock_registry import MockRegistry
from servicemock.verifier.mocker import MockFactory, MockingFunction

logger = logging.getLogger(__name__)


class ServiceMocker:
    """
    Creates services under test with every dependency mocked.

    One instance per test. Each ``create_*`` call starts a fresh registry
    entry for the class it builds.

    Usage:
        mocker = ServiceMocker()
        mailer = mocker.create_instance(Mailer, constructor={"sender": "noreply@x"})
        mocker.get_mock_for(Transport).send.assert_called_once()
    """

    def __init__(
        self,
        config: ServiceMockConfig | None = None,
        mock_factory: MockFactory | None = None,
        registry: MockRegistry | None = None,
        events: EventEmitter | None = None,
    ):
        self.config = config or ServiceMockConfig()
        self.mock_factory = mock_factory or MockFactory(self.config.mocks)
        self.registry = registry if registry is not None else MockRegistry()
        self.events = events or EventEmitter()
        self.resolver = ParameterResolver(self.config)
        self.arguments = ParameterListBuilder(self.resolver, self.mock_factory, self.registry)

    # =========================================================================
    # Public API
    # =========================================================================

    def create_instance(
        self,
        cls: type | str,
        constructor: Mapping[str, Any] | None = None,
        required: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Create a real instance with mocked constructor arguments.

        Args:
            cls: Class or importable class name
            constructor: Constructor parameter name -> explicit value
            required: Injection-method parameter name -> explicit value

        Returns:
            The constructed instance, after its injection methods ran
        """
        reflection, call = self._prepare(cls, constructor)

        service = call.apply(reflection.cls)
        self._inject(reflection, service, required)

        logger.info(f"Created {reflection.name} with {len(self.registry.mocks_for(reflection.name))} mocks")
        return service

    def create_partial_instance(
        self,
        cls: type | str,
        methods: Iterable[str],
        constructor: Mapping[str, Any] | None = None,
        required: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Create a partial double: real behaviour except for ``methods``.

        Args:
            cls: Class or importable class name
            methods: Names of the methods replaced by mocks
            constructor: Constructor parameter name -> explicit value
            required: Injection-method parameter name -> explicit value

        Returns:
            An instance of a subclass of ``cls`` whose named methods are MagicMocks
        """
        if isinstance(methods, str):
            raise TypeError(
                f"methods must be a collection of method names, not the string {methods!r}; "
                f"use [{methods!r}]"
            )
        methods = list(methods)
        reflection, call = self._prepare(cls, constructor)

        method_returns = {}
        for name in methods:
            if not reflection.has_method(name):
                raise UnknownMethodError(
                    f"Cannot mock method {name}: it does not exist in {reflection.name}"
                )
            method_returns[name] = self._default_return(reflection, name)

        service = self.mock_factory.create_partial_mock(
            reflection.cls, method_returns, call.args, call.kwargs
        )
        self._inject(reflection, service, required)

        if self.config.events.enabled:
            self.events.emit(PartialMockCreated(class_name=reflection.name, methods=methods))

        return service

    def get_mock_for(self, mocked_type: type | str, owner: type | str | None = None) -> Any:
        """
        Get a mock created by the last ``create_*`` call (or for ``owner``).

        Raises:
            UnregisteredMockError: If no such mock was created
        """
        return self.registry.get(mocked_type, owner)

    def register_factory(self, mock_type: type, factory: MockingFunction) -> None:
        """Use ``factory(mock_type)`` instead of a generated mock for ``mock_type``."""
        self.mock_factory.register_factory(mock_type, factory)

    def reset(self) -> None:
        """Forget every mock created so far."""
        self.registry.clear()

    # =========================================================================
    # Assembly steps
    # =========================================================================

    def _prepare(
        self, cls: type | str, constructor: Mapping[str, Any] | None
    ) -> tuple[ClassReflection, CallArguments]:
        reflection = ClassReflection.for_identifier(cls)

        # reset mocks of this class
        self.registry.reset(reflection.name)

        init = reflection.constructor()
        if init is None:
            call = CallArguments()
        else:
            call = self.arguments.build(reflection.name, init, constructor)

        warn_unused_overrides(reflection.name, "constructor", constructor, call.overridden)
        return reflection, call

    def _inject(
        self,
        reflection: ClassReflection,
        service: Any,
        required: Mapping[str, Any] | None,
    ) -> None:
        if not self.config.injection.enabled:
            return

        used: set[str] = set()
        for method in reflection.injection_methods(self.config.injection.marker_attribute):
            call = self.arguments.build(reflection.name, method, required)
            used |= call.overridden

            logger.debug(f"Injecting into {method}")
            call.apply(getattr(service, method.name))

        warn_unused_overrides(reflection.name, "injection", required, used)

    def _default_return(self, reflection: ClassReflection, name: str) -> Any:
        try:
            method = reflection.method(name)
        except UnknownMethodError:
            # Callable that is not a plain function (builtin, callable attribute)
            return DEFAULT
        return self.mock_factory.default_return_value(method.return_annotation())
