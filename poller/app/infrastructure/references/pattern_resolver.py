"""Resolver that derives the reference from the input URL with a regex substitution."""
from __future__ import annotations

import re


class PatternReferenceResolver:
    """Implements ReferenceResolver: inputs that do not match the pattern are unknown."""

    def __init__(self, pattern: str, replacement: str) -> None:
        self._pattern = re.compile(pattern)
        self._replacement = replacement

    def resolve(self, input_identity: str) -> str | None:
        if not self._pattern.search(input_identity):
            return None
        return self._pattern.sub(self._replacement, input_identity, count=1)
