from __future__ import annotations

import json
from typing import Union

INDENT = "  "


def prettify_json(data: Union[bytes, str], indent: str = INDENT) -> Union[str, bytes]:
    """Indent raw JSON for display.

    Tokens are copied verbatim, so number spelling, escapes, key order and
    duplicate keys survive untouched. Input that is not valid JSON is
    returned as given.
    """
    try:
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return data

    out: list[str] = []
    depth = 0
    pending_newline = False
    in_string = False
    escaped = False

    for ch in text:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch in " \t\n\r":
            continue

        if ch in "}]":
            depth -= 1
            if pending_newline:
                # empty container
                pending_newline = False
            else:
                out.append("\n" + indent * depth)
            out.append(ch)
            continue

        if pending_newline:
            out.append("\n" + indent * depth)
            pending_newline = False

        if ch in "{[":
            out.append(ch)
            depth += 1
            pending_newline = True
        elif ch == ",":
            out.append(",\n" + indent * depth)
        elif ch == ":":
            out.append(": ")
        else:
            if ch == '"':
                in_string = True
            out.append(ch)

    return "".join(out)
