"""Tests for typed values, literal inference and store coercion."""

import math

from backend.simplelogic.values import (
    Value,
    coerce_stored,
    format_number,
    infer_literal,
    parse_number,
    strip_quotes,
    to_number,
)


def test_format_number():
    assert format_number(5.0) == '5'
    assert format_number(-3.0) == '-3'
    assert format_number(2.5) == '2.5'
    assert format_number(math.nan) == 'NaN'


def test_parse_number_accepts_only_finite_decimals():
    assert parse_number('42') == 42.0
    assert parse_number(' -0.5 ') == -0.5
    assert parse_number('1e3') == 1000.0
    assert parse_number('.25') == 0.25
    for bad in ('nan', 'inf', '1_000', '12abc', '', '-'):
        assert parse_number(bad) is None


def test_coerce_stored():
    assert coerce_stored(None) is None
    assert coerce_stored('7') == Value.number(7)
    assert coerce_stored('TRUE') == Value.boolean(True)
    assert coerce_stored('false') == Value.boolean(False)
    assert coerce_stored('hello') == Value.string('hello')


def test_infer_literal():
    assert infer_literal('"5"') == Value.string('5')
    assert infer_literal('5') == Value.number(5)
    assert infer_literal('False') == Value.boolean(False)
    assert infer_literal('two words') == Value.string('two words')


def test_store_round_trip_keeps_kind():
    for value in (Value.number(3), Value.number(0.75), Value.boolean(True), Value.string('abc')):
        assert coerce_stored(value.to_store()) == value


def test_text_and_to_number():
    assert Value.boolean(False).text() == 'false'
    assert Value.number(10).text() == '10'
    assert to_number(Value.string('  ')) == 0
    assert to_number(Value.boolean(True)) == 1
    assert math.isnan(to_number(Value.string('abc')))


def test_strip_quotes_removes_one_layer():
    assert strip_quotes('"hi"') == 'hi'
    assert strip_quotes('""x""') == '"x"'
    assert strip_quotes('"open') == '"open'
