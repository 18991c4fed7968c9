"""
Error taxonomy for servicemock.

Every failure is a test-configuration problem: the double cannot be built the
way the test asked for it. Nothing here is meant to be caught and retried.
"""


class ServiceMockError(Exception):
    """Base class for all servicemock errors."""

    pass


class MissingTypeDeclarationError(ServiceMockError):
    """A parameter has no type annotation that can be read."""

    pass


class UnsupportedUnionTypeError(ServiceMockError):
    """A parameter is annotated with a union of more than one concrete type."""

    pass


class MissingRequiredValueError(ServiceMockError):
    """A built-in typed parameter has neither an override nor a default."""

    pass


class InvalidClassError(ServiceMockError):
    """The target class identifier cannot be resolved."""

    pass


class UnregisteredMockError(ServiceMockError):
    """A mock lookup asked for a (class, type) pair that was never recorded."""

    pass


class UnknownMethodError(ServiceMockError):
    """A partial double or injection list names a method the class does not have."""

    pass
