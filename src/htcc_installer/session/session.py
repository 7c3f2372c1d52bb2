"""
Installer Session

Custom actions only talk to the installer engine through a small surface:
reading and writing session properties, and writing to the installer log.
``Session`` captures that surface so the actions can run under the MSI
engine, from the standalone action runner, or against a fake in tests.

Example:
    from htcc_installer.session import PropertyBag
    session = PropertyBag({"ProductCode": "{...}", "UpgradeCode": "{...}"})
    session.set_property("MIGRATE", "{...}")
    print(session.published())
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class Session(ABC):
    """Host context handed to every custom action."""

    @abstractmethod
    def get_property(self, name: str) -> str:
        """Return the property value, or an empty string when unset."""

    @abstractmethod
    def set_property(self, name: str, value: str) -> None:
        ...

    @abstractmethod
    def log(self, message: str) -> None:
        ...

    def query_upgrade_code(self) -> str:
        return self.get_property("UpgradeCode")

    def query_product_code(self) -> str:
        return self.get_property("ProductCode")


class PropertyBag(Session):
    """
    Dictionary-backed session used by the action runner and by tests.

    Properties present when the bag is created are treated as inputs;
    ``published()`` returns only the ones an action set afterwards.

    Attributes:
        messages (list[str]): Everything logged through ``log()``, in order.
        echo (bool): Also print log messages to stderr.
    """

    def __init__(self, properties: Optional[Dict[str, str]] = None, echo: bool = False) -> None:
        self._properties: Dict[str, str] = dict(properties or {})
        self._published: Dict[str, str] = {}
        self.messages: List[str] = []
        self.echo = echo

    def load(self, properties: Dict[str, str]) -> None:
        """Add input properties; unlike set_property these are not published."""
        self._properties.update(properties)

    def get_property(self, name: str) -> str:
        return self._properties.get(name, "")

    def set_property(self, name: str, value: str) -> None:
        self._properties[name] = value
        self._published[name] = value

    def log(self, message: str) -> None:
        self.messages.append(message)
        if self.echo:
            print(message, file=sys.stderr)

    def published(self) -> Dict[str, str]:
        return dict(self._published)

    def __repr__(self) -> str:
        return f"PropertyBag(published={self._published!r})"
