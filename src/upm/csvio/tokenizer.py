"""Delimiter detection and quote-aware line splitting."""

from typing import List

COMMA = ','
TAB = '\t'
QUOTE = '"'

# Non-blank lines inspected when guessing the delimiter
DELIMITER_SAMPLE_LINES = 5


def detect_delimiter(text: str) -> str:
    """
    Guess whether `text` is comma- or tab-separated.

    Counts both characters across the first few non-blank lines; tabs win
    only on a strict majority, so ties and plain text fall back to comma.
    """
    lines = [line for line in text.split('\n') if line.strip()][:DELIMITER_SAMPLE_LINES]

    comma_count = sum(line.count(COMMA) for line in lines)
    tab_count = sum(line.count(TAB) for line in lines)

    return TAB if tab_count > comma_count else COMMA


def parse_line(line: str, delimiter: str = COMMA) -> List[str]:
    """
    Split one line into trimmed fields.

    A doubled quote inside a quoted field is a literal quote. An
    unterminated quote swallows the rest of the line into the current
    field. The last field is always emitted, even when empty.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    i = 0
    length = len(line)
    while i < length:
        char = line[i]

        if char == QUOTE:
            if in_quotes and i + 1 < length and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append(''.join(current).strip())
    return fields
