import pytest

from repform.errors import ArityMismatchError, MalformedFieldError
from repform.picture.compiler import compile_spec, parse_variable_line
from repform.picture.fields import FixedPoint, Justify, Literal, PageNumber, Scientific
from repform.picture.lexer import lex_line


def test_lex_line_classifies_every_field_kind():
    segments = lex_line("@<<< @>>> @||| @##.## @.##E## @&&")
    fields = [seg for seg in segments if not isinstance(seg, Literal)]
    assert fields == [
        Justify("left", 4),
        Justify("right", 4),
        Justify("center", 4),
        FixedPoint(3, 2, True),
        Scientific(0, 2, True, "E", 2),
        PageNumber(3),
    ]
    assert [f.width for f in fields] == [4, 4, 4, 6, 7, 3]


def test_scientific_needs_exponent_digits():
    # "E" without digits is literal text after a fixed-point field
    assert lex_line("@#E") == [FixedPoint(2, 0, False), Literal("E")]


def test_fraction_led_fixed_point():
    field = lex_line("@.##")[0]
    assert field == FixedPoint(1, 2, True)
    assert field.width == 4


def test_adjacent_fields_do_not_swallow_each_other():
    assert lex_line("@<<@>>") == [Justify("left", 3), Justify("right", 3)]


def test_literal_text_after_field():
    assert lex_line("@<<<Error") == [Justify("left", 4), Literal("Error")]


def test_chomp_introducer():
    field = lex_line("^<<<")[0]
    assert field.chomp is True
    assert field.source == "^<<<"


def test_malformed_field_reports_fragment_and_line():
    with pytest.raises(MalformedFieldError) as excinfo:
        lex_line("contact: me@host")
    assert excinfo.value.fragment == "@host"
    assert excinfo.value.line == "contact: me@host"
    assert '"@host"' in str(excinfo.value)


def test_suppress_mark_becomes_space():
    segments = lex_line("~ @<<<")
    assert segments == [Literal("  "), Justify("left", 4)]


def test_compile_spec_pairs_variable_lines_and_skips_comments():
    form = compile_spec("# header comment\n@<< @>>\na, b\nplain text\n")
    assert form.line_count == 2
    assert form.variables == [["a", "b"], []]
    assert form.lines[1].segments == [Literal("plain text")]
    assert form.variable_names() == ["a", "b"]


def test_compile_spec_accepts_list_of_lines():
    form = compile_spec(["@<<<", "name"])
    assert form.lines[0].variables == ["name"]


def test_trailing_comma_is_ignored():
    assert parse_variable_line("name, ", 1) == ["name"]


def test_arity_mismatch_in_variable_line():
    with pytest.raises(ArityMismatchError) as excinfo:
        compile_spec("@<< @<<\nonly\n")
    assert excinfo.value.expected == 2
    assert excinfo.value.received == 1


def test_missing_variable_line():
    with pytest.raises(ArityMismatchError):
        compile_spec("@<<")


def test_repeat_and_suppress_flags():
    form = compile_spec("^<<~~\ntext\n~ @<<\nnote\n@<<\nplain\n")
    repeat, suppress, plain = form.lines
    assert repeat.repeat_until_blank and repeat.suppress_if_blank
    assert suppress.suppress_if_blank and not suppress.repeat_until_blank
    assert not plain.suppress_if_blank


def test_line_width_counts_literals_and_fields():
    form = compile_spec("Total: @###.##\ntotal\n")
    assert form.lines[0].width == len("Total: @###.##")
