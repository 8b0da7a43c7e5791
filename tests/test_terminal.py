import io

import pytest

from gotodir.storage import Storage
from gotodir.ui.editor import Key, KeyCode
from gotodir.ui.terminal import decode_key, parse_cursor_response, run_ui


def test_parse_cursor_response_is_zero_based():
    assert parse_cursor_response(b"\x1b[12;40R") == (40 - 1, 12 - 1)


def test_parse_cursor_response_defaults_on_garbage():
    assert parse_cursor_response(b"\x1b[R") == (0, 0)
    assert parse_cursor_response(b"\x1b[x;yR") == (0, 0)


def test_parse_cursor_response_top_left():
    assert parse_cursor_response(b"\x1b[1;1R") == (0, 0)


@pytest.mark.parametrize(
    "data, code",
    [
        (b"\x1b[A", KeyCode.UP),
        (b"\x1b[B", KeyCode.DOWN),
        (b"\x1b[C", KeyCode.RIGHT),
        (b"\x1b[D", KeyCode.LEFT),
        (b"\x1bOA", KeyCode.UP),
        (b"\x1b[3~", KeyCode.DELETE),
        (b"\x1b[H", KeyCode.HOME),
        (b"\x1b[F", KeyCode.END),
        (b"\x1b", KeyCode.ESC),
        (b"\r", KeyCode.ENTER),
        (b"\t", KeyCode.TAB),
        (b"\x7f", KeyCode.BACKSPACE),
        (b"\x08", KeyCode.BACKSPACE),
    ],
)
def test_decode_special_keys(data, code):
    assert decode_key(data).code is code


def test_decode_control_letters():
    assert decode_key(b"\x03") == Key(KeyCode.CHAR, "c", ctrl=True)
    assert decode_key(b"\x17") == Key(KeyCode.CHAR, "w", ctrl=True)
    assert decode_key(b"\n") == Key(KeyCode.CHAR, "j", ctrl=True)


def test_decode_plain_and_unicode_chars():
    assert decode_key(b"a") == Key(KeyCode.CHAR, "a")
    assert decode_key("é".encode()) == Key(KeyCode.CHAR, "é")


def test_decode_alt_letter():
    assert decode_key(b"\x1bb") == Key(KeyCode.CHAR, "b", alt=True)


def test_decode_unknown_sequences():
    assert decode_key(b"\x1b[1;5C").code is KeyCode.OTHER
    assert decode_key(b"\xff").code is KeyCode.OTHER
    assert decode_key(b"").code is KeyCode.OTHER


def test_run_ui_requires_tty(tmp_path, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    with Storage(tmp_path / "goto.sqlite") as storage:
        with pytest.raises(RuntimeError, match="requires a TTY"):
            run_ui(storage, "query")
        assert storage.list_directories() == []