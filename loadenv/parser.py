"""Env file line parsing: KEY=VALUE splitting, quote handling, escapes."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from loadenv.exceptions import EnvFileError
from loadenv.variables import escape_literal_dollars


logger = logging.getLogger(__name__)


@dataclass
class RawLine:
    """A KEY=VALUE pair before substitution."""
    key: str
    value: str
    line_number: int


_SIMPLE_ESCAPES = {
    'a': '\a',
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
    'v': '\v',
    '\\': '\\',
    '"': '"',
}

# One escape sequence after the backslash: single char, \xHH, \uHHHH,
# \UHHHHHHHH or three octal digits
_ESCAPE_PATTERN = re.compile(
    r'\\(?:x([0-9A-Fa-f]{2})|u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8})|([0-7]{3})|(.))',
    re.DOTALL,
)


def unquote_double(value: str) -> str:
    """
    Interpret a double-quoted string, escapes included.

    Args:
        value: String including its surrounding double quotes

    Returns:
        Inner text with escape sequences interpreted

    Raises:
        ValueError: Unknown escape, dangling backslash or unescaped inner quote
    """
    if len(value) < 2 or value[0] != '"' or value[-1] != '"':
        raise ValueError("value is not wrapped in double quotes")

    body = value[1:-1]
    out = []
    pos = 0
    while pos < len(body):
        ch = body[pos]
        if ch == '"':
            raise ValueError(f"unescaped double quote at offset {pos + 1}")
        if ch != '\\':
            out.append(ch)
            pos += 1
            continue

        match = _ESCAPE_PATTERN.match(body, pos)
        if match is None:
            raise ValueError("dangling backslash at end of value")

        hex2, hex4, hex8, octal, single = match.groups()
        if single is not None:
            if single not in _SIMPLE_ESCAPES:
                raise ValueError(f"invalid escape sequence '\\{single}'")
            out.append(_SIMPLE_ESCAPES[single])
        elif octal is not None:
            code = int(octal, 8)
            if code > 0xFF:
                raise ValueError(f"octal escape out of range '\\{octal}'")
            out.append(chr(code))
        else:
            code = int(hex2 or hex4 or hex8, 16)
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise ValueError(f"invalid unicode escape '{match.group(0)}'")
            out.append(chr(code))
        pos = match.end()

    return ''.join(out)


def _strip_quotes(value: str, key: str, line_number: int, source: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        try:
            return unquote_double(value)
        except ValueError as e:
            logger.warning(
                f"Could not fully unquote value for '{key}' on line {line_number} in "
                f"'{source}': {e}. Using value after simple outer quote stripping."
            )
            return value[1:-1]

    if len(value) >= 2 and value[0] == "'" and value[-1] == "'":
        # Single quotes are literal; backslashes inside stay as written
        return value[1:-1]

    return value


def parse_line(text: str, line_number: int, source: str = "<string>") -> Optional[RawLine]:
    """
    Parse one env file line.

    Args:
        text: Raw line text
        line_number: 1-based line number for diagnostics
        source: File name used in warnings

    Returns:
        RawLine, or None for blank, comment and malformed lines
    """
    line = text.strip()
    if not line or line.startswith('#'):
        return None

    if '=' not in line:
        logger.warning(
            f"Skipping malformed line {line_number} in '{source}': '{line}'. "
            f"Expected 'KEY=VALUE' format."
        )
        return None

    key, value = line.split('=', 1)
    key = key.strip()
    value = value.strip()

    value = _strip_quotes(value, key, line_number, source)

    # After quote handling and before any substitution
    value = escape_literal_dollars(value)

    return RawLine(key=key, value=value, line_number=line_number)


def read_lines(path: Union[str, Path]) -> Iterator[RawLine]:
    """
    Yield parsed lines from an env file in order.

    Raises:
        EnvFileError: File cannot be opened or read
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            for line_number, text in enumerate(f, start=1):
                raw = parse_line(text, line_number, str(path))
                if raw is not None:
                    yield raw
    except OSError as e:
        raise EnvFileError(f"Could not read env file '{path}': {e}", path=path) from e
    except UnicodeDecodeError as e:
        raise EnvFileError(f"Error reading env file '{path}': {e}", path=path) from e
