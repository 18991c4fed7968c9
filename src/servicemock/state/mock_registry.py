"""
Mock Registry for servicemock.

Per-test registry of the mocks synthesized for each class under construction.
Populated while constructor and injection arguments are resolved.
"""

import logging
from typing import Any

from servicemock.analyzer.reflection import normalize_identifier
from servicemock.errors import UnregisteredMockError

logger = logging.getLogger(__name__)


class MockRegistry:
    """
    Owning class -> (mocked type -> mock).

    This registry:
    - Starts a fresh, empty entry whenever a class is constructed again
    - Keeps the most recently constructed class first, so lookups without an
      owning class resolve against it
    - Accepts class objects, dotted names and ``module:QualName`` names as keys

    Usage:
        registry = MockRegistry()
        registry.reset("app.services.Mailer")
        registry.register("app.services.Mailer", Transport, transport_mock)

        registry.get(Transport)  # -> transport_mock
        registry.get("app.transport.Transport", "app.services.Mailer")
    """

    def __init__(self):
        self.mocks: dict[str, dict[str, Any]] = {}

    def reset(self, owner: type | str) -> None:
        """
        Clear the entry for ``owner`` and make it the default lookup target.

        Args:
            owner: Class being constructed
        """
        key = normalize_identifier(owner)
        self.mocks.pop(key, None)
        self.mocks = {key: {}, **self.mocks}

    def register(self, owner: type | str, mocked_type: type | str, mock: Any) -> None:
        """
        Record a mock synthesized for ``owner``.

        A later mock of the same type replaces the earlier one.
        """
        owner_key = normalize_identifier(owner)
        type_key = normalize_identifier(mocked_type)
        self.mocks.setdefault(owner_key, {})[type_key] = mock
        logger.debug(f"Registered mock of {type_key} for {owner_key}")

    def get(self, mocked_type: type | str, owner: type | str | None = None) -> Any:
        """
        Look up a previously synthesized mock.

        Args:
            mocked_type: Type the mock stands in for
            owner: Class the mock was built for (default: most recent)

        Returns:
            The mock

        Raises:
            UnregisteredMockError: Nothing mocked yet, or no such pair
        """
        if owner is None:
            owner_key = next(iter(self.mocks), None)
        else:
            owner_key = normalize_identifier(owner)

        if owner_key is None:
            raise UnregisteredMockError("No services have been mocked yet")

        type_key = normalize_identifier(mocked_type)
        owned = self.mocks.get(owner_key, {})
        if type_key not in owned:
            raise UnregisteredMockError(f"Mocked class {type_key} not found in {owner_key}")

        return owned[type_key]

    def mocks_for(self, owner: type | str) -> dict[str, Any]:
        """Get a copy of every mock registered for ``owner``."""
        return dict(self.mocks.get(normalize_identifier(owner), {}))

    @property
    def current_owner(self) -> str | None:
        """The class lookups default to."""
        return next(iter(self.mocks), None)

    def clear(self) -> None:
        self.mocks.clear()

    # =========================================================================
    # Reporting
    # =========================================================================

    def get_statistics(self) -> dict:
        """
        Get statistics about the registry.

        Returns:
            Dict with mock counts per owning class
        """
        by_owner = {owner: len(owned) for owner, owned in self.mocks.items()}
        return {
            "total_owners": len(self.mocks),
            "total_mocks": sum(by_owner.values()),
            "by_owner": by_owner,
        }

    def export_mapping_table(self) -> str:
        """
        Export a human-readable table of the registry in Markdown format.

        Returns:
            Markdown string with one row per registered mock
        """
        lines = [
            "# Mock Registry",
            "",
            f"**Owning Classes**: {len(self.mocks)}",
            "",
            "| Owning Class | Mocked Type | Mock |",
            "|--------------|-------------|------|",
        ]

        for owner, owned in self.mocks.items():
            for type_key, mock in owned.items():
                lines.append(f"| `{owner}` | `{type_key}` | `{type(mock).__name__}` |")

        return "\n".join(lines)

    def __len__(self) -> int:
        """Return the number of owning classes."""
        return len(self.mocks)

    def __contains__(self, owner: type | str) -> bool:
        """Check if a class has an entry."""
        return normalize_identifier(owner) in self.mocks
