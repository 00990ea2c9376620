import io
import json

import pytest

from queqiao.reader import Features, JsonParseError, Reader, parse
from queqiao.value import CommentPlacement, ValueType


@pytest.mark.parametrize(
    "document",
    [
        '{"a": 1, "b": [true, false, null], "c": {"d": "text"}}',
        "[1, 2.5, -7, \"x\"]",
        "{}",
        "[]",
        '{"a":1,"a":2}',
        '[[], {}, [[1]], {"k": {"j": []}}]',
    ],
)
def test_parse_matches_standard_json(document):
    assert parse(document).to_python() == json.loads(document)


@pytest.mark.parametrize(
    "document",
    [r'"a\nb\u0041\t\/\\"', r'"\ud83d\ude00"', r'"\u00e9\"q\""'],
)
def test_string_escapes_match_standard_json(document):
    assert parse(document).as_string() == json.loads(document)


def test_small_integer_is_int():
    value = parse("42")
    assert value.is_int()
    assert value.as_int() == 42


def test_negative_integer():
    value = parse("-12")
    assert value.is_int()
    assert value.as_int() == -12


def test_large_positive_integer_is_unsigned():
    value = parse("3000000000")
    assert value.type is ValueType.UINT
    assert value.to_python() == 3000000000


def test_integer_beyond_unsigned_range_becomes_real():
    value = parse("5000000000")
    assert value.is_double()
    assert value.as_double() == 5000000000.0


def test_fractional_and_exponent_numbers_are_real():
    assert parse("1.5").as_double() == 1.5
    assert parse("2e3").as_double() == 2e3
    assert parse("-1.25E-2").as_double() == -1.25e-2


def test_literals():
    assert parse("true").as_bool() is True
    assert parse("false").is_bool()
    assert parse("null").is_null()


def test_parse_from_stream():
    document = '{"x": [1, 2]}'
    assert parse(io.StringIO(document)).to_python() == json.loads(document)


def test_parse_from_bytes():
    document = '["b"]'
    assert parse(document.encode("utf-8")).to_python() == json.loads(document)


@pytest.mark.parametrize("document", ["tru", "[1, 2", "[1,]", "x", "", "{\"a\":}"])
def test_invalid_documents_raise(document):
    with pytest.raises(JsonParseError):
        parse(document)


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse("@")


def test_syntax_error_message():
    with pytest.raises(JsonParseError) as info:
        parse("[1, ?]")
    assert "Syntax error: value, object or array expected." in str(info.value)


def test_missing_colon_message():
    with pytest.raises(JsonParseError) as info:
        parse('{"a" 1}')
    assert "Missing ':' after object member name" in str(info.value)


def test_missing_comma_in_object_message():
    with pytest.raises(JsonParseError) as info:
        parse('{"a": 1 ]')
    assert "Missing ',' or '}' in object declaration" in str(info.value)


def test_missing_member_name_message():
    with pytest.raises(JsonParseError) as info:
        parse("{1: 2}")
    assert "Missing '}' or object member name" in str(info.value)


def test_bad_escape_message_and_detail():
    with pytest.raises(JsonParseError) as info:
        parse(r'"a\qb"')
    message = str(info.value)
    assert "Bad escape sequence in string" in message
    assert "for detail." in message


def test_bad_unicode_digit_message():
    with pytest.raises(JsonParseError) as info:
        parse(r'"\u00zz"')
    assert "hexadecimal digit expected." in str(info.value)


def test_short_unicode_escape_message():
    with pytest.raises(JsonParseError) as info:
        parse(r'"\u12"')
    assert "four digits expected." in str(info.value)


def test_incomplete_surrogate_pair_message():
    with pytest.raises(JsonParseError) as info:
        parse(r'"\ud83d"')
    assert "surrogate pair" in str(info.value)


def test_formatted_error_location_first_line():
    reader = Reader()
    with pytest.raises(JsonParseError):
        reader.parse("x")
    assert reader.formatted_error_messages().startswith("* Line 1, Column 1\n")


def test_formatted_error_location_second_line():
    reader = Reader()
    with pytest.raises(JsonParseError) as info:
        reader.parse("[1,\n x]")
    assert "Line 2, Column 2" in reader.formatted_error_messages()
    assert str(info.value) == reader.formatted_error_messages()


def test_errors_cleared_after_successful_parse():
    reader = Reader()
    with pytest.raises(JsonParseError):
        reader.parse("[")
    assert reader.formatted_error_messages()
    assert reader.parse("[1]").to_python() == [1]
    assert reader.formatted_error_messages() == ""


def test_strict_mode_rejects_scalar_root():
    reader = Reader(Features.strict_mode())
    with pytest.raises(JsonParseError) as info:
        reader.parse("1")
    assert "A valid JSON document must be either an array or an object value." in str(
        info.value
    )


def test_strict_mode_accepts_containers():
    reader = Reader(Features.strict_mode())
    assert reader.parse('{"a": [1]}').to_python() == {"a": [1]}


def test_strict_mode_rejects_comments():
    reader = Reader(Features.strict_mode())
    with pytest.raises(JsonParseError):
        reader.parse("// note\n[1]")


def test_default_features_allow_comments():
    assert Reader(Features.all()).parse("/* c */ [1] // d").to_python() == [1]


def test_comment_before_root():
    root = parse('// head\n{\n "a" : 1\n}')
    assert root.get_comment(CommentPlacement.BEFORE) == "// head\n"


def test_comment_after_value_on_same_line():
    root = parse('{\n "a" : 1 // tail\n}')
    assert root["a"].get_comment(CommentPlacement.AFTER_ON_SAME_LINE) == "// tail\n"


def test_comment_before_array_element():
    root = parse("[1,\n/* c */ 2]")
    assert root[1].get_comment(CommentPlacement.BEFORE) == "/* c */"
    assert not root[0].has_comment(CommentPlacement.BEFORE)


def test_trailing_comment_goes_after_root():
    root = parse("[1]\n// end")
    assert root.get_comment(CommentPlacement.AFTER) == "// end"


def test_comments_not_collected_when_disabled():
    root = Reader().parse("// head\n[1 // x\n]", collect_comments=False)
    assert root.to_python() == [1]
    assert not root.has_comment(CommentPlacement.BEFORE)
    assert not root[0].has_comment(CommentPlacement.AFTER_ON_SAME_LINE)


def test_unterminated_c_comment_raises():
    with pytest.raises(JsonParseError):
        parse("/* never closed [1]")


def test_reader_can_be_reused():
    reader = Reader()
    first = reader.parse('{"a": 1}')
    second = reader.parse("[2]")
    assert first.to_python() == {"a": 1}
    assert second.to_python() == [2]