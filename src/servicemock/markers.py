"""
Injection markers.

A class declares the methods servicemock calls after construction either
explicitly, by implementing ``SupportsInjection``, or by decorating public
methods with ``@required``.
"""

from typing import Callable, Iterable, Protocol, TypeVar, runtime_checkable

from servicemock.config.models import DEFAULT_MARKER_ATTRIBUTE

F = TypeVar("F", bound=Callable)


def required(func: F | None = None, *, marker: str = DEFAULT_MARKER_ATTRIBUTE):
    """
    Mark a public method as an injection method.

    Usable bare (``@required``) or with a custom marker attribute
    (``@required(marker="__inject__")``) when the configuration names one.
    """

    def decorate(f: F) -> F:
        setattr(f, marker, True)
        return f

    if func is None:
        return decorate
    return decorate(func)


def is_required(func: Callable, marker: str = DEFAULT_MARKER_ATTRIBUTE) -> bool:
    """Check whether a function carries the injection marker."""
    return getattr(func, marker, False) is True


@runtime_checkable
class SupportsInjection(Protocol):
    """Classes that list their injection methods explicitly."""

    @classmethod
    def injection_methods(cls) -> Iterable[str]:
        ...
