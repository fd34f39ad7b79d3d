# deployhook/utils/jsontext.py
"""Whitespace-only rewrites of JSON text.

Both helpers expect text that already parsed as JSON. They never reparse
values, so number literals, string escapes and duplicate keys are kept
byte for byte.
"""

_WHITESPACE = " \t\n\r"


def _tokens(text: str):
    """Yield ``(char, in_string)`` for every character outside insignificant whitespace."""
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            yield char, True
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char in _WHITESPACE:
            continue
        else:
            if char == '"':
                in_string = True
                yield char, True
            else:
                yield char, False


def compact(text: str) -> str:
    return "".join(char for char, _ in _tokens(text))


def indent(text: str, step: str = "  ") -> str:
    """Pretty-print ``text`` one member per line, ``step`` per nesting level.

    Empty objects and arrays stay on one line (``{}``, ``[]``).
    """
    chars = list(_tokens(text))
    out = []
    depth = 0
    skip_newline = False
    for i, (char, in_string) in enumerate(chars):
        if in_string:
            out.append(char)
            continue
        if char in "{[":
            out.append(char)
            closer = "}" if char == "{" else "]"
            if i + 1 < len(chars) and chars[i + 1] == (closer, False):
                skip_newline = True
                continue
            depth += 1
            out.append("\n" + step * depth)
        elif char in "}]":
            if skip_newline:
                skip_newline = False
                out.append(char)
                continue
            depth -= 1
            out.append("\n" + step * depth + char)
        elif char == ",":
            out.append(",\n" + step * depth)
        elif char == ":":
            out.append(": ")
        else:
            out.append(char)
    return "".join(out)
