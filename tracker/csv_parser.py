from __future__ import annotations

import re
from typing import List, Tuple


DELIMITER = ","
QUOTE = '"'

_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")


def parse_line(line: str) -> List[str]:
    """Split one CSV line into trimmed field values.

    A field is quoted only when the quote opens at a field boundary; inside it,
    commas are literal and a doubled quote stands for one quote. The closing
    quote must sit right before a delimiter or the end of the line, otherwise it
    is kept as text. Malformed input is tokenized on a best-effort basis.
    """
    fields: List[str] = []
    buf: List[str] = []
    in_quotes = False
    at_field_start = True
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if in_quotes:
            if ch == QUOTE:
                nxt = line[i + 1] if i + 1 < n else None
                if nxt == QUOTE:
                    buf.append(QUOTE)
                    i += 2
                    continue
                if nxt is None or nxt == DELIMITER:
                    in_quotes = False
                    i += 1
                    continue
            buf.append(ch)
        elif ch == DELIMITER:
            fields.append("".join(buf).strip())
            buf = []
            at_field_start = True
            i += 1
            continue
        elif ch == QUOTE and at_field_start:
            in_quotes = True
        else:
            buf.append(ch)
        at_field_start = False
        i += 1
    fields.append("".join(buf).strip())
    return fields


def split_csv_document(text: str) -> Tuple[List[str], List[List[str]]]:
    """Return (headers, rows) for a whole CSV document, skipping blank lines."""
    if not text:
        return [], []
    text = text.lstrip("﻿")
    lines = [ln for ln in _LINE_BREAK_RE.split(text) if ln.strip()]
    if not lines:
        return [], []
    headers = parse_line(lines[0])
    rows = [parse_line(ln) for ln in lines[1:]]
    return headers, rows
