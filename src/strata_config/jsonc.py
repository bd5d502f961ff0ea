"""JSON with comments.

Configuration files may carry ``//`` line comments and ``/* */`` block
comments. Comments are blanked out before parsing so that the line and
column reported by ``json.JSONDecodeError`` still point into the original
text. Comments are not written back.
"""

import json
from typing import Any

INDENT = 4


def strip_comments(text: str) -> str:
    """Replace comments outside of string literals with whitespace.

    Newlines inside block comments are kept so line numbers are unchanged.
    """
    out: list[str] = []
    i = 0
    length = len(text)
    in_string = False

    while i < length:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if in_string:
            out.append(ch)
            if ch == "\\" and nxt:
                out.append(nxt)
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif ch == "/" and nxt == "/":
            end = text.find("\n", i)
            end = length if end == -1 else end
            out.append(" " * (end - i))
            i = end
        elif ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            end = length if end == -1 else end + 2
            out.extend("\n" if c == "\n" else " " for c in text[i:end])
            i = end
        else:
            out.append(ch)
            i += 1

    return "".join(out)


def loads(text: str) -> Any:
    """Parse JSON that may contain comments.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON
    """
    return json.loads(strip_comments(text))


def dumps(obj: Any) -> str:
    """Serialize a configuration document with fixed indentation."""
    return json.dumps(obj, indent=INDENT, ensure_ascii=False)
