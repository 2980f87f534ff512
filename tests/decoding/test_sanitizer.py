# /tests/decoding/test_sanitizer.py

import json
import pytest

from src.decoding import repair, sanitizer
from src.decoding.sanitizer import is_html_error_payload, sanitize_chunk_text


@pytest.mark.parametrize(
    "html",
    [
        "<!DOCTYPE html><html><body>502 Bad Gateway</body></html>",
        "   <html><head></head><body>oops</body>",
        'upstream said: <div>error</div></html>',
    ],
)
def test_html_is_replaced_by_error_object(html, caplog):
    with caplog.at_level("WARNING"):
        result = sanitize_chunk_text(html)
    decoded = json.loads(result)
    assert decoded["errorType"] == "HTML_RESPONSE"
    assert decoded["error"] == "Received HTML error page from server"
    assert is_html_error_payload(result)
    assert "HTML content instead of JSON" in caplog.text


def test_plain_json_is_not_an_html_error():
    assert not is_html_error_payload('{"data": {"a": 1}}')
    assert not is_html_error_payload("not json")


@pytest.mark.parametrize(
    "text",
    [
        '{"data": {"scriptTitle": "Intro", "scriptDuration": 30}}',
        '{"data":{"a":[1,2,3]}}',
        "plain narration without any json",
    ],
)
def test_idempotent_on_clean_input(text):
    once = sanitize_chunk_text(text)
    assert sanitize_chunk_text(once) == once


def test_json_shaped_text_is_repaired():
    result = sanitize_chunk_text("{'data': {'a': 1,}}")
    assert json.loads(result) == {"data": {"a": 1}}


def test_repair_failure_falls_through(monkeypatch, caplog):
    def broken(text):
        raise ValueError("cannot repair")

    monkeypatch.setattr(repair, "repair_json", broken)
    with caplog.at_level("DEBUG"):
        result = sanitize_chunk_text('{"data": "a\\qb"}')
    assert result == '{"data": "a\\\\qb"}'
    assert "proceeding with standard sanitization" in caplog.text


def test_lone_backslashes_are_escaped():
    assert sanitize_chunk_text("path C:\\data") == "path C:\\\\data"
    # valid escapes stay untouched
    assert sanitize_chunk_text('say \\"hi\\" \\n') == 'say \\"hi\\" \\n'


def test_control_characters_are_removed():
    assert sanitize_chunk_text("a\x00b\x07c\x1fd") == "abcd"
    assert sanitize_chunk_text("line one\n\n\nline two") == "line oneline two"


def test_never_raises(monkeypatch, caplog):
    def explode(text):
        raise RuntimeError("boom")

    monkeypatch.setattr(sanitizer, "is_html", explode)
    with caplog.at_level("ERROR"):
        assert sanitize_chunk_text("anything") == "anything"
    assert "Error sanitizing chunk text" in caplog.text


def test_prose_separated_objects_are_not_merged():
    text = '{"data":{"a":1}} trailing {"data":{"a":2}}'
    assert sanitize_chunk_text(text) == text
