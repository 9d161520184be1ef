import json

import pytest

from poller.app.config.settings import Settings
from poller.app.infrastructure.references.factory import create_reference_resolver
from poller.app.infrastructure.references.mapping_resolver import MappingReferenceResolver
from poller.app.infrastructure.references.pattern_resolver import PatternReferenceResolver


def test_pattern_resolver_rewrites_matching_input():
    resolver = PatternReferenceResolver(r"tmp-img-(.+)\.png$", r"tmp-out-\1.pdf")
    assert (
        resolver.resolve("https://cdn.example.com/samples/tmp-img-ABC-3-22x20.png")
        == "https://cdn.example.com/samples/tmp-out-ABC-3-22x20.pdf"
    )


def test_pattern_resolver_unknown_input_is_none():
    resolver = PatternReferenceResolver(r"tmp-img-(.+)\.png$", r"tmp-out-\1.pdf")
    assert resolver.resolve("https://cdn.example.com/photo.jpg") is None


def test_mapping_resolver_lookup():
    resolver = MappingReferenceResolver({"in-a": "out-a"})
    assert len(resolver) == 1
    assert resolver.resolve("in-a") == "out-a"
    assert resolver.resolve("in-b") is None


def test_mapping_resolver_from_json_file(tmp_path):
    path = tmp_path / "refs.json"
    path.write_text(json.dumps({"https://s/a.png": "https://s/a.pdf"}), encoding="utf-8")

    resolver = MappingReferenceResolver.from_json_file(path)

    assert resolver.resolve("https://s/a.png") == "https://s/a.pdf"


@pytest.mark.parametrize("content", ['["a", "b"]', '{"a": 1}'])
def test_mapping_resolver_rejects_non_string_tables(tmp_path, content):
    path = tmp_path / "refs.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError, match="string to string"):
        MappingReferenceResolver.from_json_file(path)


def test_factory_defaults_to_pattern_backend():
    assert isinstance(create_reference_resolver(Settings()), PatternReferenceResolver)


def test_factory_file_backend(tmp_path):
    path = tmp_path / "refs.json"
    path.write_text('{"x": "y"}', encoding="utf-8")

    resolver = create_reference_resolver(Settings(reference_backend="FILE", reference_map_file=str(path)))

    assert isinstance(resolver, MappingReferenceResolver)
    assert resolver.resolve("x") == "y"


def test_factory_file_backend_requires_path():
    with pytest.raises(ValueError, match="REFERENCE_MAP_FILE"):
        create_reference_resolver(Settings(reference_backend="file"))


def test_factory_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported reference backend: s3"):
        create_reference_resolver(Settings(reference_backend="s3"))
