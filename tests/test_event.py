import pytest

from ssestream import Event, EventFormatError, parse_sse_message


def test_defaults_for_empty_message() -> None:
    event = parse_sse_message("")
    assert event == Event()
    assert event.event == "message"
    assert event.data == ""
    assert event.id is None
    assert event.retry is None


def test_all_fields() -> None:
    event = parse_sse_message("event: update\ndata: hello\nid: 7\nretry: 1500")
    assert event == Event(data="hello", event="update", id="7", retry=1500)


def test_multiline_data_joined_with_newline() -> None:
    assert parse_sse_message("data: a\ndata: b").data == "a\nb"


@pytest.mark.parametrize("raw", ["data: a\ndata: b", "data: a\rdata: b", "data: a\r\ndata: b"])
def test_line_endings(raw: str) -> None:
    assert parse_sse_message(raw).data == "a\nb"


def test_mixed_line_endings_in_one_block() -> None:
    event = parse_sse_message("data: 1\r\ndata: 2\rdata: 3\nevent: x")
    assert event.data == "1\n2\n3"
    assert event.event == "x"


def test_only_protocol_line_endings_split_lines() -> None:
    # unicode line separators are data, not line breaks
    assert parse_sse_message("data: a\u2028b\x0bc").data == "a\u2028b\x0bc"


def test_only_one_leading_space_is_stripped() -> None:
    assert parse_sse_message("data:  two").data == " two"
    assert parse_sse_message("data:none").data == "none"


def test_value_keeps_later_colons() -> None:
    assert parse_sse_message("data: a: b:c").data == "a: b:c"


def test_line_without_colon_is_field_with_empty_value() -> None:
    event = parse_sse_message("data\ndata\ndata: x")
    # empty values do not count as content for the newline join
    assert event.data == "x"
    assert parse_sse_message("event").event == ""


def test_comments_are_ignored() -> None:
    base = parse_sse_message("event: tick\ndata: 1\nid: 3")
    with_comments = parse_sse_message(": hi\nevent: tick\n:data: nope\ndata: 1\n: id: 9\nid: 3")
    assert with_comments == base


def test_unknown_fields_do_not_affect_others() -> None:
    event = parse_sse_message("foo: bar\ndata: kept\nData: ignored\nevent: e")
    assert event.data == "kept"
    assert event.event == "e"


def test_last_event_and_id_win() -> None:
    event = parse_sse_message("event: a\nid: 1\nevent: b\nid: 2")
    assert event.event == "b"
    assert event.id == "2"


def test_empty_id_is_treated_as_absent() -> None:
    assert parse_sse_message("id:\ndata: x").id is None
    assert parse_sse_message("id: 5\nid:").id is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [("5000", 5000), ("abc", 0), ("", 0), ("12abc", 12), (" 7", 7), ("-3", 0)],
)
def test_retry_best_effort_integer(value: str, expected: int) -> None:
    assert parse_sse_message(f"retry:{value}").retry == expected


def test_parse_is_deterministic() -> None:
    raw = "event: e\ndata: 1\ndata: 2\nid: x\nretry: 10"
    assert parse_sse_message(raw) == parse_sse_message(raw)
    assert Event.parse(raw) == parse_sse_message(raw)


def test_bytes_are_decoded() -> None:
    assert parse_sse_message("data: 你好".encode("utf-8")).data == "你好"
    assert Event.parse("data: é".encode("latin-1"), encoding="latin-1").data == "é"


def test_undecodable_bytes_raise_format_error() -> None:
    with pytest.raises(EventFormatError) as exc_info:
        parse_sse_message(b"data: \xff\xfe")
    assert exc_info.value.raw == b"data: \xff\xfe"
    assert isinstance(exc_info.value, ValueError)


def test_non_text_input_raises_format_error() -> None:
    with pytest.raises(EventFormatError):
        parse_sse_message(42)  # type: ignore[arg-type]


def test_event_is_immutable() -> None:
    event = parse_sse_message("data: x")
    with pytest.raises(AttributeError):
        event.data = "y"  # type: ignore[misc]
