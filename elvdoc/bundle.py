"""
Bundle data model for elv archives.

A bundle is the four-asset content of an archive before serialization:

    role       filename        entry path
    template   template.html   elvdoc/template.html
    style      style.css       elvdoc/style.css
    script     function.js     elvdoc/function.js
    config     config.yaml     elvdoc/config.yaml

Invariants:
    - A bundle always holds all four payloads (empty strings allowed)
    - Entry paths are ENTRY_PREFIX joined with the role's filename
    - Only config is parsed; the other payloads are opaque text

How to change safely:
    - Never rename an entry path, existing archives depend on it
    - Adding a role changes the container layout for every reader
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Tuple

ENTRY_PREFIX = "elvdoc"


class AssetRole(Enum):
    """The four fixed asset roles, in the order they are written."""

    TEMPLATE = "template"
    STYLE = "style"
    SCRIPT = "script"
    CONFIG = "config"

    @property
    def filename(self) -> str:
        """Filename of the asset inside the bundle directory."""
        return _FILENAMES[self]

    @property
    def entry_name(self) -> str:
        """Full tar entry name, e.g. ``elvdoc/config.yaml``."""
        return f"{ENTRY_PREFIX}/{self.filename}"

    @classmethod
    def from_entry_name(cls, name: str) -> AssetRole | None:
        """Map a tar entry name back to its role, or None if unknown."""
        return _BY_ENTRY.get(name)


_FILENAMES: Dict[AssetRole, str] = {
    AssetRole.TEMPLATE: "template.html",
    AssetRole.STYLE: "style.css",
    AssetRole.SCRIPT: "function.js",
    AssetRole.CONFIG: "config.yaml",
}

_BY_ENTRY: Dict[str, AssetRole] = {role.entry_name: role for role in AssetRole}

CONFIG_ENTRY = AssetRole.CONFIG.entry_name


@dataclass(frozen=True)
class Bundle:
    """The four text payloads of an elv archive.

    Attributes:
        template: HTML template markup
        style: Stylesheet text
        script: Script text
        config: YAML configuration text

    Example:
        >>> bundle = Bundle(template="<html/>", style="", script="", config="version: '1'")
        >>> bundle.get(AssetRole.TEMPLATE)
        '<html/>'
    """

    template: str
    style: str
    script: str
    config: str

    def get(self, role: AssetRole) -> str:
        """Return the payload for a role."""
        return getattr(self, role.value)

    def entries(self) -> Iterator[Tuple[str, bytes]]:
        """Yield (entry name, UTF-8 payload) pairs in write order."""
        for role in AssetRole:
            yield role.entry_name, self.get(role).encode("utf-8")

    @classmethod
    def from_roles(cls, payloads: Dict[AssetRole, str]) -> Bundle:
        """Build a bundle from a role-keyed mapping.

        Raises:
            KeyError: If any of the four roles is missing
        """
        return cls(**{role.value: payloads[role] for role in AssetRole})
