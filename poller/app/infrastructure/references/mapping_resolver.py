"""Resolver backed by an explicit input -> reference table (in memory or a JSON file)."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping


class MappingReferenceResolver:
    """Implements ReferenceResolver over a fixed mapping."""

    def __init__(self, mapping: Mapping[str, str]) -> None:
        self._mapping = dict(mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def resolve(self, input_identity: str) -> str | None:
        return self._mapping.get(input_identity)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "MappingReferenceResolver":
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
        ):
            raise ValueError(f"reference map {path} must be a JSON object of string to string")
        return cls(raw)
