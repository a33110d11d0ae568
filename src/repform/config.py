from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from repform.errors import ConfigError
from repform.form import Form, parse_band
from repform.pagination import DEFAULT_PAGE_LENGTH
from repform.picture.compiler import Spec
from repform.renderer import Renderer


@dataclass
class RenderConfig:
    page_length: int = DEFAULT_PAGE_LENGTH
    form_feed: bool = True


@dataclass
class Layout:
    """A named set of band specs plus the page settings to render them with."""

    name: str
    bands: dict[str, Spec]
    render: RenderConfig = field(default_factory=RenderConfig)
    base_dir: Path | None = None

    @staticmethod
    def from_mapping(payload: dict[str, Any], base_dir: Path | None = None) -> Layout:
        raw_bands = payload.get("bands")
        if not isinstance(raw_bands, dict) or not raw_bands:
            raise ConfigError("layout needs a non-empty 'bands' mapping")
        bands: dict[str, Spec] = {}
        for key, value in raw_bands.items():
            band = parse_band(key)
            bands[band.value] = _band_spec(key, value, base_dir)
        return Layout(
            name=str(payload.get("name", "layout")),
            bands=bands,
            render=RenderConfig(
                page_length=int(payload.get("page_length", DEFAULT_PAGE_LENGTH)),
                form_feed=bool(payload.get("form_feed", True)),
            ),
            base_dir=base_dir,
        )

    def renderer(self) -> Renderer:
        return Renderer(page_length=self.render.page_length, form_feed=self.render.form_feed)

    def compile(self, renderer: Renderer | None = None) -> Form:
        renderer = renderer or self.renderer()
        return renderer.compile(self.bands)


def _band_spec(key: str, value: Any, base_dir: Path | None) -> Spec:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return [str(line) for line in value]
    if isinstance(value, dict) and "file" in value:
        path = Path(value["file"])
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        if not path.is_file():
            raise ConfigError(f"band {key!r}: file not found: {path}")
        return path.read_text()
    raise ConfigError(f"band {key!r} must be text, a list of lines or {{file: path}}")


def load_layout(path: Path) -> Layout:
    if path.suffix.lower() in {".yml", ".yaml"}:
        payload = yaml.safe_load(path.read_text())
    else:
        payload = json.loads(path.read_text())
    if not isinstance(payload, dict):
        raise ConfigError(f"{path}: layout must be a mapping")
    return Layout.from_mapping(payload, base_dir=path.parent)


def sample_layout() -> dict[str, Any]:
    return {
        "name": "invoices",
        "page_length": 20,
        "form_feed": False,
        "bands": {
            "top": "Invoices                 page @&&\npage\n",
            "detail": "@<<<<<<<<<<< $@######.##\ncustomer, amount\n",
            "bottom": "------------------------------\n",
        },
    }
