from pathlib import Path

import orjson
import pytest
import yaml

from repform.config import Layout, load_layout, sample_layout
from repform.errors import ConfigError


def test_load_yaml_layout(tmp_path: Path) -> None:
    path = tmp_path / "layout.yaml"
    path.write_text(yaml.safe_dump(sample_layout()))
    layout = load_layout(path)
    assert layout.name == "invoices"
    assert layout.render.page_length == 20
    assert layout.render.form_feed is False
    assert set(layout.bands) == {"top", "detail", "bottom"}

    renderer = layout.renderer()
    form = layout.compile(renderer)
    assert renderer.context.page_length == 20
    assert form.context is renderer.context
    assert form.band_size("top") == 1


def test_band_from_file_and_list(tmp_path: Path) -> None:
    (tmp_path / "detail.txt").write_text("@<<\nx\n")
    path = tmp_path / "layout.json"
    path.write_bytes(
        orjson.dumps({"name": "f", "bands": {"detail": {"file": "detail.txt"}, "bottom": ["--"]}})
    )
    layout = load_layout(path)
    assert layout.bands["detail"] == "@<<\nx\n"
    assert layout.bands["bottom"] == ["--"]
    assert layout.render.page_length == 60
    assert layout.compile().band_size("bottom") == 1


def test_missing_band_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="file not found"):
        Layout.from_mapping({"bands": {"detail": {"file": "nope.txt"}}}, base_dir=tmp_path)


def test_bad_layouts():
    with pytest.raises(ConfigError):
        Layout.from_mapping({"name": "empty"})
    with pytest.raises(ConfigError):
        Layout.from_mapping({"bands": {"margin": "x"}})
    with pytest.raises(ConfigError):
        Layout.from_mapping({"bands": {"detail": 3}})


def test_aliases_are_normalized():
    layout = Layout.from_mapping({"bands": {"page-detail": "x", "page_footer": "--"}})
    assert set(layout.bands) == {"detail", "bottom"}
