"""Interactive picker drawn inline on the controlling terminal."""

from __future__ import annotations

import os
import re
import select
import sys
import termios
import tty
from collections.abc import Iterator
from dataclasses import replace

from gotodir.storage import Storage
from gotodir.ui.editor import App, Key, KeyCode
from gotodir.ui.render import (
    MAX_VISIBLE_ITEMS,
    PopupLayout,
    PopupMode,
    compute_layout,
    format_input_row,
    pad_to_width,
    popup_lines,
    styled_line_with_matches,
)

EVENT_POLL_SECONDS = 0.1

_CLEAR_LINE = "\x1b[0m\x1b[2K"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CURSOR_QUERY = b"\x1b[6n"
_NUMBER = re.compile(r"\+?[0-9]+")

_ESCAPE_KEYS: dict[bytes, KeyCode] = {
    b"A": KeyCode.UP,
    b"B": KeyCode.DOWN,
    b"C": KeyCode.RIGHT,
    b"D": KeyCode.LEFT,
    b"H": KeyCode.HOME,
    b"F": KeyCode.END,
    b"1~": KeyCode.HOME,
    b"7~": KeyCode.HOME,
    b"4~": KeyCode.END,
    b"8~": KeyCode.END,
    b"3~": KeyCode.DELETE,
}


def _parse_position(text: str | None) -> int:
    if text is None or not _NUMBER.fullmatch(text):
        return 1
    value = int(text)
    return value if value <= 0xFFFF else 1


def parse_cursor_response(response: bytes) -> tuple[int, int]:
    """Turn a ``ESC [ row ; col R`` reply into a zero-based ``(col, row)``."""
    text = response.decode("utf-8", errors="replace")
    while text.startswith("\x1b["):
        text = text[2:]
    text = text.rstrip("R")
    parts = text.split(";")
    row = _parse_position(parts[0] if parts else None)
    col = _parse_position(parts[1] if len(parts) > 1 else None)
    return max(col - 1, 0), max(row - 1, 0)


def _utf8_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if 0xC0 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF7:
        return 4
    return 1


def _key_sequences(data: bytes) -> Iterator[bytes]:
    """Split raw terminal input into the byte sequences of single key presses."""
    i, n = 0, len(data)
    while i < n:
        if data[i] == 0x1B and i + 1 < n:
            follower = data[i + 1]
            if follower == 0x5B:
                j = i + 2
                while j < n and not 0x40 <= data[j] <= 0x7E:
                    j += 1
                end = j + 1
            elif follower == 0x4F:
                end = i + 3
            elif follower == 0x1B:
                end = i + 1
            else:
                end = i + 1 + _utf8_length(follower)
        else:
            end = i + _utf8_length(data[i])
        end = min(end, n)
        yield data[i:end]
        i = end


def decode_key(data: bytes) -> Key:
    """Decode the bytes of one key press as sent by a terminal in raw mode."""
    if not data:
        return Key(KeyCode.OTHER)

    first = data[0]
    if first == 0x1B:
        if len(data) == 1:
            return Key(KeyCode.ESC)
        if data[1] in (0x5B, 0x4F) and len(data) > 2:
            code = _ESCAPE_KEYS.get(data[2:])
            return Key(code) if code is not None else Key(KeyCode.OTHER)
        inner = decode_key(data[1:])
        if inner.code is KeyCode.CHAR:
            return replace(inner, alt=True)
        return Key(KeyCode.OTHER)

    if len(data) == 1:
        if first == 0x0D:
            return Key(KeyCode.ENTER)
        if first == 0x09:
            return Key(KeyCode.TAB)
        if first in (0x7F, 0x08):
            return Key(KeyCode.BACKSPACE)
        if first == 0x00:
            return Key(KeyCode.CHAR, " ", ctrl=True)
        if 0x01 <= first <= 0x1A:
            return Key(KeyCode.CHAR, chr(first - 0x01 + ord("a")), ctrl=True)
        if 0x1C <= first <= 0x1F:
            return Key(KeyCode.CHAR, chr(first - 0x1C + ord("4")), ctrl=True)

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return Key(KeyCode.OTHER)
    if len(text) != 1:
        return Key(KeyCode.OTHER)
    return Key(KeyCode.CHAR, text)


def _move_cursor(col: int, row: int) -> str:
    return f"\x1b[{row + 1};{col + 1}H"


def _clear_layout(layout: PopupLayout) -> str:
    return "".join(
        _move_cursor(0, layout.top_row + offset) + _CLEAR_LINE for offset in range(layout.height)
    )


def _draw_popup(
    app: App,
    anchor_col: int,
    anchor_row: int,
    prev_layout: PopupLayout | None,
    cols: int,
    rows: int,
) -> tuple[str, PopupLayout]:
    max_width = max(cols, 1)
    desired_items = min(max(len(app.results), 1), MAX_VISIBLE_ITEMS)
    layout = compute_layout(rows, anchor_row, 1 + desired_items)

    out: list[str] = []
    if prev_layout is not None:
        out.append(_clear_layout(prev_layout))

    lines = popup_lines(app, layout)
    content_width = max((len(line) for line in lines), default=1)
    popup_width = min(max(content_width, 1), max_width)
    input_index = 0 if layout.mode is PopupMode.BELOW else len(lines) - 1
    input_right = f"{len(app.results)}/{len(app.cached_directories)}"

    for i, line in enumerate(lines[: layout.height]):
        out.append(_move_cursor(0, layout.top_row + i))
        out.append(_CLEAR_LINE)
        if i == input_index:
            aligned = pad_to_width(format_input_row(line, input_right, popup_width), popup_width)
            out.append(f"\x1b[7m{aligned}\x1b[0m")
        else:
            padded = pad_to_width(line, popup_width)
            out.append(styled_line_with_matches(padded, app.query, padded.startswith(">")))

    out.append(_move_cursor(anchor_col, anchor_row))
    return "".join(out), layout


def _write(fd: int, text: str) -> None:
    payload = text.encode("utf-8")
    while payload:
        written = os.write(fd, payload)
        payload = payload[written:]


def _query_cursor_position(fd: int) -> tuple[int, int]:
    os.write(fd, _CURSOR_QUERY)
    response = bytearray()
    while True:
        byte = os.read(fd, 1)
        if not byte:
            raise OSError("terminal closed while reading cursor position")
        response += byte
        if byte == b"R":
            break
        if len(response) > 64:
            raise OSError("cursor position response too long")
    return parse_cursor_response(bytes(response))


def _is_ctrl(key: Key, char: str) -> bool:
    return key.code is KeyCode.CHAR and key.ctrl and key.char == char


def run_ui(storage: Storage, initial_query: str) -> str | None:
    """Let the user pick a directory interactively; None if cancelled."""
    if not sys.stdin.isatty():
        raise RuntimeError("Interactive mode requires a TTY on stdin. Use --auto for scripting.")

    try:
        fd = os.open("/dev/tty", os.O_RDWR | os.O_NOCTTY)
    except OSError as exc:
        raise RuntimeError(f"Interactive mode requires a terminal (/dev/tty): {exc}") from exc

    try:
        saved_mode = termios.tcgetattr(fd)
    except termios.error:
        os.close(fd)
        raise
    tty.setraw(fd)

    anchor: tuple[int, int] | None = None
    last_layout: PopupLayout | None = None
    cursor_hidden = False

    try:
        anchor_col, anchor_row = _query_cursor_position(fd)
        anchor = (anchor_col, anchor_row)

        _write(fd, _HIDE_CURSOR)
        cursor_hidden = True

        app = App(initial_query, storage)
        needs_redraw = True

        while True:
            if needs_redraw:
                cols, rows = os.get_terminal_size(fd)
                frame, last_layout = _draw_popup(
                    app, anchor_col, anchor_row, last_layout, cols, rows
                )
                _write(fd, frame)
                needs_redraw = False

            ready, _, _ = select.select([fd], [], [], EVENT_POLL_SECONDS)
            if not ready:
                continue
            data = os.read(fd, 1024)
            if not data:
                return None

            for sequence in _key_sequences(data):
                key = decode_key(sequence)
                if _is_ctrl(key, "c") or key.code is KeyCode.ESC:
                    return None
                if key.code is KeyCode.ENTER:
                    if app.selected_index is not None:
                        app.selected_path = str(app.results[app.selected_index].directory.path)
                    return app.selected_path
                if key.code is KeyCode.UP or _is_ctrl(key, "p"):
                    app.previous()
                elif key.code is KeyCode.DOWN or _is_ctrl(key, "j") or _is_ctrl(key, "n"):
                    app.next()
                else:
                    app.apply_key_editing(key)
                needs_redraw = True
    finally:
        cleanup: list[str] = []
        if last_layout is not None:
            cleanup.append(_clear_layout(last_layout))
        if anchor is not None:
            cleanup.append(_move_cursor(*anchor))
        if cursor_hidden:
            cleanup.append(_SHOW_CURSOR)
        try:
            _write(fd, "".join(cleanup))
        except OSError:
            pass
        try:
            termios.tcsetattr(fd, termios.TCSANOW, saved_mode)
        except termios.error:
            pass
        os.close(fd)