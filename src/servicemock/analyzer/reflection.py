"""
Class reflection for servicemock.

Thin layer over ``inspect`` and ``typing`` that answers the questions the
resolver and the assembler ask about a class: where its constructor is,
which parameters a method takes, which type each parameter declares, and
which public methods are injection methods.
"""

import builtins
import collections.abc
import importlib
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from servicemock.config.models import DEFAULT_MARKER_ATTRIBUTE, ServiceMockConfig
from servicemock.errors import InvalidClassError, UnknownMethodError
from servicemock.markers import SupportsInjection, is_required

logger = logging.getLogger(__name__)

MISSING = inspect.Parameter.empty

_UNION_ORIGINS = (typing.Union, types.UnionType)
_CALLABLE_FORMS = (typing.Callable, collections.abc.Callable)


def qualified_name(cls: Any) -> str:
    """Return the registry key form of a class: ``module.QualName``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def normalize_identifier(identifier: Any) -> str:
    """
    Normalize a class object or dotted/colon name to ``module.QualName``.

    Generic aliases such as ``Box[int]`` normalize to their origin class,
    matching how their mocks are registered. Anything else normalizes to its
    ``repr`` and so never matches a registered class.
    """
    origin = typing.get_origin(identifier)
    if isinstance(origin, type):
        identifier = origin
    if isinstance(identifier, type):
        return qualified_name(identifier)
    if isinstance(identifier, str):
        return identifier.replace(":", ".")
    return repr(identifier)


def resolve_class(identifier: type | str) -> type:
    """
    Resolve a class object or an importable name to a class.

    Accepts ``pkg.mod.Class``, ``pkg.mod:Class`` and ``pkg.mod:Outer.Inner``.

    Raises:
        InvalidClassError: If the identifier does not name an importable class
    """
    if isinstance(identifier, type):
        return identifier

    if not isinstance(identifier, str) or not identifier.strip():
        raise InvalidClassError(
            f"Failed to read class reflection for {identifier!r}, "
            "specify a proper fully qualified class name"
        )

    try:
        if ":" in identifier:
            module_name, _, attr_path = identifier.partition(":")
            target: Any = importlib.import_module(module_name)
        else:
            target, attr_path = _import_longest_prefix(identifier)

        for part in attr_path.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError, ValueError) as e:
        raise InvalidClassError(
            f"Failed to read class reflection for '{identifier}', "
            "specify a proper fully qualified class name"
        ) from e

    if not isinstance(target, type):
        raise InvalidClassError(f"'{identifier}' does not name a class")

    return target


def _import_longest_prefix(dotted: str) -> tuple[types.ModuleType, str]:
    """Import the longest module prefix of a dotted name, return it with the rest."""
    parts = dotted.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            return importlib.import_module(module_name), ".".join(parts[split:])
        except ModuleNotFoundError as e:
            # Only a missing prefix is a reason to try a shorter one
            if e.name is None or not module_name.startswith(e.name):
                raise
    raise ImportError(f"No importable module in '{dotted}'")


# ============================================================================
# Type declarations
# ============================================================================


@dataclass(frozen=True)
class TypeDeclaration:
    """
    A parameter's declared type, split into its alternatives.

    ``None`` is dropped from unions, so ``Optional[X]`` and ``X | None``
    declare the single type ``X``.
    """

    annotation: Any
    members: tuple[Any, ...]

    @classmethod
    def from_annotation(cls, annotation: Any) -> "TypeDeclaration":
        if typing.get_origin(annotation) in _UNION_ORIGINS:
            members = tuple(a for a in typing.get_args(annotation) if a is not type(None))
            return cls(annotation, members or (type(None),))
        return cls(annotation, (annotation,))

    @property
    def is_union(self) -> bool:
        return len(self.members) > 1

    @property
    def python_type(self) -> Any:
        """The single member with generic aliases and NewTypes unwrapped."""
        if self.is_union:
            raise TypeError(f"{self.annotation!r} declares more than one type")
        return _unwrap(self.members[0])

    @property
    def name(self) -> str:
        t = self.python_type
        if isinstance(t, type):
            return qualified_name(t)
        return repr(t)

    def is_builtin(self, config: ServiceMockConfig | None = None) -> bool:
        """Whether the single declared type cannot be mocked."""
        member = self.members[0]
        if member is None or member is Any or isinstance(member, typing.TypeVar):
            return True
        if typing.get_origin(member) is typing.Literal:
            return True
        if member in _CALLABLE_FORMS or typing.get_origin(member) in _CALLABLE_FORMS:
            return True

        t = self.python_type
        if not isinstance(t, type):
            return True
        if t.__module__ == builtins.__name__:
            return True
        return config is not None and config.is_extra_builtin(qualified_name(t))


def _unwrap(t: Any) -> Any:
    while hasattr(t, "__supertype__"):
        t = t.__supertype__
    origin = typing.get_origin(t)
    return origin if origin is not None else t


# ============================================================================
# Parameters and methods
# ============================================================================


@dataclass(frozen=True)
class ParameterReflection:
    """A single parameter of a reflected method."""

    name: str
    kind: inspect._ParameterKind
    annotation: Any = MISSING
    default: Any = MISSING

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def has_type(self) -> bool:
        return self.annotation is not MISSING

    @property
    def is_variadic(self) -> bool:
        return self.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)

    def type_declaration(self) -> TypeDeclaration:
        return TypeDeclaration.from_annotation(self.annotation)


def _evaluate_annotation(name: str, annotation: str, globalns: dict[str, Any]) -> Any:
    """Evaluate one string annotation in the namespace of its function."""
    stand_in = types.FunctionType((lambda: None).__code__, globalns)
    stand_in.__annotations__ = {name: annotation}
    return typing.get_type_hints(stand_in)[name]


class MethodReflection:
    """A plain function found on a class, seen from an instance."""

    def __init__(self, owner: type, name: str, function: Callable):
        self.owner = owner
        self.name = name
        self.function = function

    def parameters(self) -> list[ParameterReflection]:
        """Parameters in declaration order, without the bound ``self``."""
        signature = inspect.signature(self.function)
        hints = self._type_hints()

        result = []
        for index, param in enumerate(signature.parameters.values()):
            if index == 0 and param.kind in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                continue

            annotation = hints.get(param.name, param.annotation)
            if isinstance(annotation, str):
                # Forward reference that could not be evaluated
                annotation = MISSING

            result.append(
                ParameterReflection(
                    name=param.name,
                    kind=param.kind,
                    annotation=annotation,
                    default=param.default,
                )
            )
        return result

    def return_annotation(self) -> Any:
        return self._type_hints().get("return", MISSING)

    def _type_hints(self) -> dict[str, Any]:
        try:
            return typing.get_type_hints(self.function)
        except (NameError, TypeError, AttributeError, SyntaxError) as e:
            logger.debug(f"Could not evaluate all type hints of {self}: {e}")

        try:
            annotations = dict(getattr(self.function, "__annotations__", None) or {})
        except NameError:
            return {}

        # One annotation at a time, so an unresolvable one only hides itself
        globalns = getattr(inspect.unwrap(self.function), "__globals__", {})
        hints = {}
        for name, annotation in annotations.items():
            if not isinstance(annotation, str):
                hints[name] = annotation
                continue
            try:
                hints[name] = _evaluate_annotation(name, annotation, globalns)
            except (NameError, TypeError, AttributeError, SyntaxError) as e:
                logger.debug(f"Could not evaluate annotation of '{name}' in {self}: {e}")
        return hints

    def __str__(self) -> str:
        return f"{qualified_name(self.owner)}.{self.name}"

    def __repr__(self) -> str:
        return f"MethodReflection({self})"


class ClassReflection:
    """Reflection over a resolved class."""

    def __init__(self, cls: type):
        self.cls = cls

    @classmethod
    def for_identifier(cls, identifier: type | str) -> "ClassReflection":
        return cls(resolve_class(identifier))

    @property
    def name(self) -> str:
        return qualified_name(self.cls)

    def constructor(self) -> MethodReflection | None:
        """The ``__init__`` the class uses, or None when only object's applies."""
        for klass in self.cls.__mro__:
            if klass is object:
                return None
            init = vars(klass).get("__init__")
            if init is None:
                continue
            if inspect.isfunction(init):
                return MethodReflection(self.cls, "__init__", init)
            # Builtin base (slot wrapper): no reflectable parameters
            return None
        return None

    def _members(self) -> Iterator[tuple[str, Any]]:
        seen: set[str] = set()
        for klass in self.cls.__mro__:
            if klass is object:
                continue
            for name, attr in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                yield name, attr

    def public_methods(self) -> list[MethodReflection]:
        """Public plain functions, subclass definitions first."""
        return [
            MethodReflection(self.cls, name, attr)
            for name, attr in self._members()
            if not name.startswith("_") and inspect.isfunction(attr)
        ]

    def method(self, name: str) -> MethodReflection:
        for member_name, attr in self._members():
            if member_name == name and inspect.isfunction(attr):
                return MethodReflection(self.cls, name, attr)
        raise UnknownMethodError(f"Method {name} not found in {self.name}")

    def has_method(self, name: str) -> bool:
        return callable(getattr(self.cls, name, None))

    def declares_injection_methods(self) -> bool:
        if not isinstance(self.cls, SupportsInjection):
            return False
        declared = inspect.getattr_static(self.cls, "injection_methods")
        return isinstance(declared, (classmethod, staticmethod))

    def injection_methods(
        self, marker_attribute: str = DEFAULT_MARKER_ATTRIBUTE
    ) -> list[MethodReflection]:
        """
        Methods to invoke right after construction.

        An explicit ``injection_methods()`` declaration wins over markers. It
        must be a classmethod or staticmethod; an instance method of that name
        is an ordinary method and markers apply.
        """
        if self.declares_injection_methods():
            return [self.method(name) for name in self.cls.injection_methods()]

        return [
            method
            for method in self.public_methods()
            if is_required(method.function, marker_attribute)
        ]
