"""Launchable application item."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class App(BaseModel):
    """An application parsed from a desktop entry.

    Equality and hashing follow ``identity_fields``; ``terminal`` is launch
    metadata only.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    exec: str
    icon: str
    terminal: bool = False

    def sort_string(self) -> str:
        return self.name

    def identity_fields(self) -> tuple[Any, ...]:
        return (self.name, self.exec, self.icon)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, App):
            return NotImplemented
        return self.identity_fields() == other.identity_fields()

    def __hash__(self) -> int:
        return hash(self.identity_fields())

    def command(self) -> list[str]:
        """Exec split into argv, field codes already removed."""
        return self.exec.split()
