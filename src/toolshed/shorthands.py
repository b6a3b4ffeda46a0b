"""Short plugin names mapped to the git repositories that provide them."""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from .errors import FetchError, ToolshedError

if TYPE_CHECKING:
    from .config.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_SHORTHANDS: dict[str, str] = {
    "deno": "https://github.com/asdf-community/asdf-deno.git",
    "elixir": "https://github.com/asdf-vm/asdf-elixir.git",
    "erlang": "https://github.com/asdf-vm/asdf-erlang.git",
    "golang": "https://github.com/kennyp/asdf-golang.git",
    "java": "https://github.com/halcyon/asdf-java.git",
    "nodejs": "https://github.com/asdf-vm/asdf-nodejs.git",
    "python": "https://github.com/danhper/asdf-python.git",
    "ruby": "https://github.com/asdf-vm/asdf-ruby.git",
    "rust": "https://github.com/code-lever/asdf-rust.git",
    "terraform": "https://github.com/asdf-community/asdf-hashicorp.git",
    "tiny": "https://github.com/jdxcode/rtx-tiny.git",
}


def load_shorthands(source: str | Path) -> dict[str, str]:
    """Load a shorthand registry.

    Args:
        source: Where to read from. ``http://`` / ``https://`` URLs are fetched
            and must return a JSON object; other values are paths to a
            ``.toml`` or ``.json`` file mapping plugin names to repository URLs.

    Raises:
        FetchError: If the URL cannot be fetched or does not contain a mapping.
        ToolshedError: If the file cannot be read or parsed.
    """
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        return _fetch_shorthands(source)
    return _read_shorthands(Path(source))


def build_shorthands(settings: Settings) -> dict[str, str]:
    shorthands = {} if settings.disable_default_shorthands else dict(DEFAULT_SHORTHANDS)
    if settings.shorthands_file is not None:
        shorthands.update(load_shorthands(settings.shorthands_file))
    return shorthands


def _fetch_shorthands(url: str) -> dict[str, str]:
    try:
        response = httpx.get(url, follow_redirects=True, timeout=30)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(f"HTTP {e.response.status_code} fetching {url}", url=url) from e
    except httpx.HTTPError as e:
        raise FetchError(f"Network error fetching {url}: {e}", url=url) from e

    try:
        data = response.json()
    except ValueError as e:
        raise FetchError(f"Invalid JSON at {url}: {e}", url=url) from e
    if not isinstance(data, dict):
        raise FetchError(f"Expected a JSON object at {url}", url=url)
    return _normalize(data)


def _read_shorthands(path: Path) -> dict[str, str]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ToolshedError(f"Failed to read shorthands file {path}: {e}") from e
    try:
        data = json.loads(text) if path.suffix == ".json" else tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ToolshedError(f"Invalid shorthands file {path}: {e}") from e
    return _normalize(data)


def _normalize(data: dict[str, Any]) -> dict[str, str]:
    out: dict[str, str] = {}
    for name, url in data.items():
        if isinstance(url, str):
            out[name] = url
        else:
            logger.debug("ignoring shorthand %s: not a string", name)
    return out
