"""Tab-separated text used for clipboard transfer.

Rows end with a newline and fields are separated by tabs. Inside a field,
tab, newline, carriage return and backslash are written as ``\\t``, ``\\n``,
``\\r`` and ``\\\\`` so one cell always stays one field.
"""

from __future__ import annotations

from collections.abc import Iterable

_ESCAPES = {"\t": r"\t", "\n": r"\n", "\r": r"\r", "\\": "\\\\"}
_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "\\": "\\"}


def escape_field(text: str) -> str:
    """Escape one field for TSV output."""
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def write_tsv(rows: Iterable[Iterable[str]]) -> str:
    """Serialise rows of fields; every row, including the last, ends with a newline."""
    return "".join("\t".join(escape_field(field) for field in row) + "\n" for row in rows)


def parse_tsv(text: str) -> list[list[str]]:
    """Parse TSV text into rows of fields.

    Every newline closes a row, so an empty line is a row with one empty
    field. Text after the last newline is a row only if it is not empty.
    Carriage returns outside escapes are ignored and an unknown escape keeps
    its backslash.

    Example:
        >>> parse_tsv("a\\tb\\n\\nc")
        [['a', 'b'], [''], ['c']]
    """
    rows: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    escaping = False

    for ch in text:
        if escaping:
            if ch in _UNESCAPES:
                field.append(_UNESCAPES[ch])
            else:
                field.append("\\")
                field.append(ch)
            escaping = False
        elif ch == "\t":
            row.append("".join(field))
            field = []
        elif ch == "\n":
            row.append("".join(field))
            rows.append(row)
            row, field = [], []
        elif ch == "\r":
            continue
        elif ch == "\\":
            escaping = True
        else:
            field.append(ch)

    if escaping:
        field.append("\\")
    if row or field:
        row.append("".join(field))
        rows.append(row)

    return rows


def table_width(rows: list[list[str]]) -> int:
    """Width of the widest parsed row."""
    return max((len(row) for row in rows), default=0)
