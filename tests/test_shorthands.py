"""Tests for the shorthand registry (files and HTTP)."""

import json

import pytest

from toolshed import FetchError, Settings, ToolshedError
from toolshed.shorthands import DEFAULT_SHORTHANDS, build_shorthands, load_shorthands

URL = "https://example.com/shorthands.json"


def test_defaults():
    shorthands = build_shorthands(Settings())
    assert shorthands == DEFAULT_SHORTHANDS
    assert shorthands["nodejs"].endswith("asdf-nodejs.git")


def test_file_overrides_defaults(tmp_path):
    path = tmp_path / "shorthands.toml"
    path.write_text('nodejs = "https://example.com/node.git"\ntiny = "https://example.com/tiny.git"\n')
    shorthands = build_shorthands(Settings(shorthands_file=path))
    assert shorthands["nodejs"] == "https://example.com/node.git"
    assert shorthands["tiny"] == "https://example.com/tiny.git"
    assert "ruby" in shorthands


def test_defaults_disabled(tmp_path):
    path = tmp_path / "shorthands.toml"
    path.write_text('tiny = "https://example.com/tiny.git"\n')
    settings = Settings(shorthands_file=path, disable_default_shorthands=True)
    assert build_shorthands(settings) == {"tiny": "https://example.com/tiny.git"}


def test_json_file_skips_non_strings(tmp_path):
    path = tmp_path / "shorthands.json"
    path.write_text(json.dumps({"tiny": "https://example.com/tiny.git", "bad": 3}))
    assert load_shorthands(path) == {"tiny": "https://example.com/tiny.git"}


def test_missing_file(tmp_path):
    with pytest.raises(ToolshedError):
        load_shorthands(tmp_path / "nope.toml")


def test_invalid_toml(tmp_path):
    path = tmp_path / "shorthands.toml"
    path.write_text("tiny = ")
    with pytest.raises(ToolshedError):
        load_shorthands(path)


def test_fetch_over_http(httpx_mock):
    httpx_mock.add_response(url=URL, json={"tiny": "https://example.com/tiny.git"})
    assert load_shorthands(URL) == {"tiny": "https://example.com/tiny.git"}


def test_fetch_http_404(httpx_mock):
    httpx_mock.add_response(url=URL, status_code=404)
    with pytest.raises(FetchError) as exc_info:
        load_shorthands(URL)
    assert exc_info.value.url == URL


def test_fetch_invalid_json(httpx_mock):
    httpx_mock.add_response(url=URL, content=b"not json")
    with pytest.raises(FetchError):
        load_shorthands(URL)


def test_fetch_not_a_mapping(httpx_mock):
    httpx_mock.add_response(url=URL, json=["tiny"])
    with pytest.raises(FetchError):
        load_shorthands(URL)
