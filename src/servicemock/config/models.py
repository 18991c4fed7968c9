"""
Core configuration models for servicemock.

Defines all configuration structures using Pydantic for validation.
"""

from pydantic import BaseModel, Field

DEFAULT_MARKER_ATTRIBUTE = "__servicemock_required__"


# ============================================================================
# Mock Configuration
# ============================================================================


class MockConfig(BaseModel):
    """How doubles for constructor and injection parameters are built."""

    autospec: bool = Field(
        default=True,
        description="Build doubles with create_autospec (False uses MagicMock(spec=...))",
    )
    spec_set: bool = Field(
        default=False, description="Forbid setting attributes the mocked type does not have"
    )


# ============================================================================
# Injection Configuration
# ============================================================================


class InjectionConfig(BaseModel):
    """Configuration for the post-construction injection pass."""

    enabled: bool = Field(default=True, description="Invoke injection methods after construction")
    marker_attribute: str = Field(
        default=DEFAULT_MARKER_ATTRIBUTE,
        description="Function attribute that marks a public method as an injection method",
    )


# ============================================================================
# Event Configuration
# ============================================================================


class EventConfig(BaseModel):
    """Configuration for partial-double notifications."""

    enabled: bool = Field(default=True, description="Emit an event when a partial double is built")


# ============================================================================
# Main Configuration
# ============================================================================


class ServiceMockConfig(BaseModel):
    """Root configuration model for servicemock."""

    mocks: MockConfig = Field(default_factory=MockConfig)
    injection: InjectionConfig = Field(default_factory=InjectionConfig)
    events: EventConfig = Field(default_factory=EventConfig)
    builtin_types: list[str] = Field(
        default_factory=list,
        description="Extra dotted type names treated as non-mockable (e.g. 'datetime.datetime')",
    )

    def is_extra_builtin(self, qualified_name: str) -> bool:
        """Check whether a type was configured as non-mockable."""
        return qualified_name in self.builtin_types


# ============================================================================
# Event Models
# ============================================================================


class PartialMockCreated(BaseModel):
    """Announces that a partial double was built for a class."""

    class_name: str = Field(description="Qualified name of the doubled class")
    methods: list[str] = Field(default_factory=list, description="Methods replaced by mocks")
