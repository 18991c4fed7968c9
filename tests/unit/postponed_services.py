"""
Sample services whose annotations are postponed strings.

``Gadget`` is imported for type checkers only, so it cannot be evaluated at
runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sample_services import Logger, Repository

if TYPE_CHECKING:
    from gadgets import Gadget


class UsesTypeChecking:
    def __init__(self, log: Logger, name: str = "x", gadget: Gadget | None = None):
        self.log = log
        self.name = name
        self.gadget = gadget

    def repository(self) -> Repository:
        raise AssertionError("real repository() called")

    def gadget_for(self, key: str) -> Gadget:
        raise AssertionError("real gadget_for() called")
