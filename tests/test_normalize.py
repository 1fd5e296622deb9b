from lenient_csv.models import LineBreakPolicy, TrailingLineFeedPolicy
from lenient_csv.normalize import decode_text, describe_line_breaks, normalize_line_breaks, preprocess


def test_strict_line_breaks():
    assert normalize_line_breaks("a\r\nb\rc\nd") == "a\nb\nc\nd"
    assert normalize_line_breaks("a\n\rb") == "a\n\nb"


def test_loose_line_breaks_accept_lf_cr():
    assert normalize_line_breaks("a\n\rb", LineBreakPolicy.loose) == "a\nb"


def test_loose_line_breaks_scan_left_to_right():
    assert normalize_line_breaks("\r\n\r", LineBreakPolicy.loose) == "\n\n"
    assert normalize_line_breaks("\n\r\n", LineBreakPolicy.loose) == "\n\n"


def test_preprocess_appends_missing_line_feed():
    assert preprocess("a,b") == "a,b\n"
    assert preprocess("a,b\n") == "a,b\n"
    assert preprocess("") == "\n"


def test_preprocess_require_always_appends():
    assert preprocess("a,b\n", trailing_policy=TrailingLineFeedPolicy.require) == "a,b\n\n"
    assert preprocess("a,b", trailing_policy=TrailingLineFeedPolicy.require) == "a,b\n"


def test_preprocess_strips_nul_after_line_breaks():
    # A NUL between CR and LF must not merge them into one break
    assert preprocess("a\r\0\nb") == "a\n\nb\n"
    assert preprocess("a\0b") == "ab\n"


def test_describe_line_breaks():
    assert describe_line_breaks("a\r\nb\rc\nd") == {"crlf": 1, "cr": 1, "lf": 1}


def test_decode_text_strips_utf8_bom():
    text, report = decode_text(b"\xef\xbb\xbfid,name\n1,Test\n")

    assert text.startswith("id,name")
    assert report["decode_fallback"] is False


def test_decode_text_plain_utf8():
    text, _ = decode_text("name,city\nZoë,Zürich\n".encode("utf-8"))

    assert "Zürich" in text
