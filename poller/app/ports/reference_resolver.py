"""Port: map a work item's input identity to its finalized artifact reference."""
from __future__ import annotations

from typing import Protocol


class ReferenceResolver(Protocol):
    def resolve(self, input_identity: str) -> str | None:
        """Return the finalized reference, or None when the input is unknown."""
        ...
