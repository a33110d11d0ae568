import pytest

from repform.errors import ConfigError
from repform.form import Band, Form, parse_band


def test_from_bands_with_aliases():
    form = Form.from_bands({"page-detail": "@<<\nx\n", "page_footer": "--", "group-bottom": "=="})
    assert form.size == 1
    assert form.band_size("bottom") == 1
    assert form.group_footer is not None
    assert form.top is None


def test_top_is_the_body_without_detail():
    form = Form.from_bands({"top": "Heading"})
    assert form.size == 1
    assert form.top is None


def test_missing_body_is_rejected():
    with pytest.raises(ConfigError):
        Form.from_bands({"bottom": "--"})


def test_unknown_band_is_rejected():
    with pytest.raises(ConfigError, match="sidebar"):
        Form.from_bands({"detail": "x", "sidebar": "y"})
    assert parse_band("Group-Header") is Band.GROUP_HEADER


def test_band_cycles_are_rejected():
    a = Form("a")
    b = Form("b")
    a.set_band("top", b)
    with pytest.raises(ConfigError, match="recursive"):
        b.set_band("top", a)
    with pytest.raises(ConfigError):
        a.set_band("bottom", a)


def test_band_form_has_a_single_owner():
    shared = Form("shared")
    Form("one").set_band("top", shared)
    with pytest.raises(ConfigError, match="another form"):
        Form("two").set_band("bottom", shared)


def test_detail_cannot_be_set_as_band():
    with pytest.raises(ConfigError):
        Form("x").set_band(Band.DETAIL, "y")


def test_bands_share_the_owner_context():
    parent = Form("body")
    top = parent.set_band("top", ["Title"])
    nested = top.set_band("bottom", "under title")
    assert top.context is parent.context
    assert nested.context is parent.context
    assert list(parent.walk()) == [top, nested]
