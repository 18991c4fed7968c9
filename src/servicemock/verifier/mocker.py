"""
Mock construction.

Builds the doubles the assembler asks for: a full mock standing in for a
dependency type, and a partial double that keeps a class's real behaviour
except for a named set of methods. Behaviour of the doubles themselves comes
from ``unittest.mock``.
"""

import logging
from enum import Enum
from typing import Any, Callable, Iterable
from unittest.mock import DEFAULT, MagicMock, create_autospec

from servicemock.analyzer.reflection import MISSING, TypeDeclaration
from servicemock.config.models import MockConfig

logger = logging.getLogger(__name__)

MockingFunction = Callable[[type], Any]

# Return values of mocked methods annotated with a built-in type
EMPTY_RETURN_VALUES: dict[type, Callable[[], Any]] = {
    bool: bool,
    int: int,
    float: float,
    complex: complex,
    str: str,
    bytes: bytes,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
}


class MockStrategy(str, Enum):
    """Strategy for building a dependency double."""

    AUTOSPEC = "autospec"  # create_autospec(type, instance=True)
    SPEC = "spec"  # MagicMock(spec=type)
    CUSTOM = "custom"  # Caller-supplied mocking function


class MockFactory:
    """Creates dependency doubles and partial doubles."""

    def __init__(
        self,
        config: MockConfig | None = None,
        mocking_function: MockingFunction | None = None,
    ):
        """
        Initialize the mock factory.

        Args:
            config: Mock settings (autospec, spec_set)
            mocking_function: Replaces the default strategy for every type
        """
        self.config = config or MockConfig()
        self.mocking_function = mocking_function
        self._factories: dict[type, MockingFunction] = {}

    @property
    def strategy(self) -> MockStrategy:
        if self.mocking_function is not None:
            return MockStrategy.CUSTOM
        return MockStrategy.AUTOSPEC if self.config.autospec else MockStrategy.SPEC

    def register_factory(self, mock_type: type, factory: MockingFunction) -> None:
        """Supply the double for one type instead of generating it."""
        self._factories[mock_type] = factory

    def has_factory(self, mock_type: type) -> bool:
        return mock_type in self._factories

    def create_mock(self, mock_type: type) -> Any:
        """Create a double that can stand in for ``mock_type``."""
        factory = self._factories.get(mock_type)
        if factory is not None:
            return factory(mock_type)

        strategy = self.strategy
        if strategy == MockStrategy.CUSTOM:
            return self.mocking_function(mock_type)
        if strategy == MockStrategy.AUTOSPEC:
            return create_autospec(mock_type, spec_set=self.config.spec_set, instance=True)
        if self.config.spec_set:
            return MagicMock(spec_set=mock_type)
        return MagicMock(spec=mock_type)

    def default_return_value(self, annotation: Any) -> Any:
        """
        The value a mocked method returns before the test programs it.

        ``DEFAULT`` keeps MagicMock's own child-mock behaviour.
        """
        if annotation is MISSING:
            return DEFAULT
        if annotation is None or annotation is type(None):
            return None

        declaration = TypeDeclaration.from_annotation(annotation)
        if declaration.is_union:
            return DEFAULT
        if declaration.members != (annotation,):
            # Optional[X]
            return None

        return_type = declaration.python_type
        if return_type in EMPTY_RETURN_VALUES:
            return EMPTY_RETURN_VALUES[return_type]()
        if declaration.is_builtin():
            return DEFAULT
        return self.create_mock(return_type)

    def create_partial_mock(
        self,
        cls: type,
        method_returns: dict[str, Any],
        args: Iterable[Any] = (),
        kwargs: dict[str, Any] | None = None,
    ) -> Any:
        """
        Build a partial double of ``cls``.

        The named methods are MagicMocks on a throwaway subclass, so they are
        in place while the real constructor runs with ``args``/``kwargs``.
        Copying the double skips the class's own copy hooks.

        Args:
            cls: Class to double
            method_returns: Method name -> initial return value (or DEFAULT)
            args: Positional constructor arguments
            kwargs: Keyword constructor arguments

        Returns:
            An instance of a subclass of ``cls``
        """
        namespace: dict[str, Any] = {
            "__module__": cls.__module__,
            "__qualname__": cls.__qualname__,
            "__copy__": _copy_without_hooks,
            "__deepcopy__": lambda self, memo: _copy_without_hooks(self),
        }
        for name, return_value in method_returns.items():
            namespace[name] = MagicMock(name=f"{cls.__qualname__}.{name}", return_value=return_value)

        partial_cls = type(cls)(cls.__name__, (cls,), namespace)
        logger.debug(f"Built partial class for {cls.__qualname__} mocking {list(method_returns)}")

        return partial_cls(*args, **(kwargs or {}))


def _copy_without_hooks(obj: Any) -> Any:
    duplicate = object.__new__(type(obj))
    state = getattr(obj, "__dict__", None)
    if state is not None:
        duplicate.__dict__.update(state)
    return duplicate
