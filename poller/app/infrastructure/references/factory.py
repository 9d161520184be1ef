"""Reference resolver factory: selects implementation from config. Only place that imports concrete resolvers."""
from __future__ import annotations

from poller.app.config.settings import Settings
from poller.app.constants import REFERENCE_BACKEND
from poller.app.infrastructure.references.mapping_resolver import MappingReferenceResolver
from poller.app.infrastructure.references.pattern_resolver import PatternReferenceResolver
from poller.app.ports.reference_resolver import ReferenceResolver


def create_reference_resolver(settings: Settings) -> ReferenceResolver:
    backend = settings.reference_backend.strip().lower()

    if backend == REFERENCE_BACKEND.PATTERN:
        return PatternReferenceResolver(settings.reference_pattern, settings.reference_replacement)
    if backend == REFERENCE_BACKEND.FILE:
        if not settings.reference_map_file:
            raise ValueError("REFERENCE_MAP_FILE is required for the file reference backend")
        return MappingReferenceResolver.from_json_file(settings.reference_map_file)

    raise ValueError(f"Unsupported reference backend: {backend}")
