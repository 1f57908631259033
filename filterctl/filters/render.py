"""
Helpers for the line-based filter rendering.
"""

from io import StringIO

_INDENT = "  "

# Parser states of indent_query
_OTHER = 0
_SKIP_SPACES = 1
_IN_QUOTES = 2


def indent(query: str, level: int) -> str:
    """
    Indent a query by its nesting, one operand per line.

    Returns the query unchanged when it contains no grouping, so simple
    queries stay on the same line as their parameter name.
    """
    out = StringIO()
    if not indent_query(query, out, level + 1):
        return query
    return "\n" + out.getvalue().rstrip("\n ")


def indent_query(query: str, out: StringIO, level: int) -> bool:
    """
    Write the query to out, breaking lines on spaces and groupings.

    Quoted operands are written as-is.

    Returns:
        True if some indentation was needed
    """
    out.write(_INDENT * level)

    needed = False
    state = _SKIP_SPACES

    def write_indentation(n: int) -> None:
        nonlocal needed
        out.write("\n")
        out.write(_INDENT * n)
        needed = True

    for ch in query:
        if state == _IN_QUOTES:
            out.write(ch)
            if ch == '"':
                state = _OTHER
            continue

        if ch == " ":
            if state == _SKIP_SPACES:
                continue
            write_indentation(level)
        elif ch in "{(":
            out.write(ch)
            level += 1
            write_indentation(level)
            state = _SKIP_SPACES
        elif ch in "})":
            write_indentation(level - 1)
            out.write(ch)
            level -= 1
            write_indentation(level)
            state = _SKIP_SPACES
        elif ch == ":":
            out.write(ch)
            state = _SKIP_SPACES
        elif ch == '"':
            out.write(ch)
            state = _IN_QUOTES
        else:
            out.write(ch)
            state = _OTHER

    return needed
