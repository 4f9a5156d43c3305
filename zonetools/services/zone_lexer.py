"""Lexical helpers for BIND style zone file lines.

Quote aware tokenizing, comment splitting, parenthesis detection and the
small classifiers used by the zone parser. Double quotes are the only
quoting mechanism; a ``;`` or parenthesis inside a quoted string is text.
"""
import re
from typing import List, Tuple


QUOTE_CHAR = '"'
COMMENT_CHAR = ';'
PAREN_OPEN = '('
PAREN_CLOSE = ')'

# A record comments that exclude the record from reverse zones
INADDR_COMMENTS = frozenset({"inaddr", "in-addr"})

KNOWN_RR_TYPES = frozenset({
    "A", "AAAA", "CNAME", "MX", "TXT", "NS", "SOA",
    "PTR", "SRV", "CAA", "HINFO", "NAPTR", "SPF",
})

CLASS_IN = "IN"
KNOWN_CLASSES = frozenset({CLASS_IN, "CH", "HS", "CS"})

UINT_BITS_MAX = {8: 0xFF, 16: 0xFFFF, 32: 0xFFFFFFFF}

_WHITESPACE = re.compile(r'\s+')


class RecordError(ValueError):
    """Raised when record or directive data is malformed."""
    pass


def tokenize(line: str) -> List[str]:
    """Split a line into tokens, keeping quoted strings whole.

    Whitespace inside a pair of double quotes does not end a token and the
    quote characters stay in the token. An unbalanced quote swallows the
    rest of the line into one token.

    Args:
        line: Content line, comments already removed

    Returns:
        List of tokens (empty for a blank line)
    """
    if QUOTE_CHAR not in line:
        return line.split()

    line = _WHITESPACE.sub(' ', line)
    tokens = []
    current = []
    in_quotes = False

    for char in line:
        if char == QUOTE_CHAR:
            in_quotes = not in_quotes
            current.append(char)
        elif char == ' ' and not in_quotes:
            if current:
                tokens.append(''.join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append(''.join(current))

    return tokens


def find_comment_start(line: str) -> int:
    """Index of the first ``;`` outside double quotes, or -1."""
    in_quotes = False
    for index, char in enumerate(line):
        if char == QUOTE_CHAR:
            in_quotes = not in_quotes
        elif char == COMMENT_CHAR and not in_quotes:
            return index
    return -1


def split_comment(line: str) -> Tuple[str, str]:
    """Separate a line into content and comment.

    Args:
        line: A single physical line

    Returns:
        Tuple of (content, comment), both stripped; comment excludes the ``;``
    """
    start = find_comment_start(line)
    if start == -1:
        return line.strip(), ""
    return line[:start].strip(), line[start + 1:].strip()


def paren_balance(line: str) -> int:
    """Unquoted ``(`` count minus unquoted ``)`` count."""
    balance = 0
    in_quotes = False
    for char in line:
        if char == QUOTE_CHAR:
            in_quotes = not in_quotes
        elif in_quotes:
            continue
        elif char == PAREN_OPEN:
            balance += 1
        elif char == PAREN_CLOSE:
            balance -= 1
    return balance


def contains_unquoted_parenthesis(line: str) -> bool:
    in_quotes = False
    for char in line:
        if char == QUOTE_CHAR:
            in_quotes = not in_quotes
        elif not in_quotes and char in (PAREN_OPEN, PAREN_CLOSE):
            return True
    return False


def join_continuation(accumulated: str, next_line: str) -> str:
    """Append a continuation line to a multi-line record.

    Adjacent quoted strings are joined without a space so TXT payloads
    split over lines stay contiguous; everything else gets one space.
    """
    if accumulated.rstrip().endswith(QUOTE_CHAR) and next_line.startswith(QUOTE_CHAR):
        return accumulated.rstrip() + next_line
    return f"{accumulated} {next_line}"


def is_numeric(value: str) -> bool:
    """Check whether a token is an unsigned 32-bit decimal integer."""
    if not value.isascii() or not value.isdigit():
        return False
    return int(value) <= UINT_BITS_MAX[32]


def is_known_rr_type(value: str) -> bool:
    return value.upper() in KNOWN_RR_TYPES


def is_class(value: str) -> bool:
    return value.upper() in KNOWN_CLASSES


def is_inaddr_comment(comment: str) -> bool:
    """Check whether an A record comment marks it as excluded from reverse zones."""
    return comment.strip().lower() in INADDR_COMMENTS


def parse_uint(value: str, bits: int, what: str) -> int:
    """Parse an unsigned decimal integer of the given width.

    Args:
        value: Token to parse
        bits: Width in bits (8, 16 or 32)
        what: Field description used in the error message

    Returns:
        Parsed integer

    Raises:
        RecordError: If the token is not a decimal integer in range
    """
    if not value.isascii() or not value.isdigit():
        raise RecordError(f"invalid {what}: {value!r} is not an unsigned integer")
    number = int(value)
    if number > UINT_BITS_MAX[bits]:
        raise RecordError(f"invalid {what}: {value} out of range for uint{bits}")
    return number


def qualify_domain_name(name: str, origin: str) -> str:
    """Make a name fully qualified relative to an origin.

    ``@`` is the origin itself (the root when no origin is set yet), names
    ending in a dot are already absolute and anything else has the origin
    appended.

    Args:
        name: Name as written in the zone
        origin: Current origin (dot terminated)

    Returns:
        Dot terminated absolute name
    """
    if name == "@":
        return origin or "."
    if name.endswith("."):
        return name
    if not origin or origin == ".":
        return f"{name}."
    qualified = f"{name}.{origin}"
    if not qualified.endswith("."):
        qualified += "."
    return qualified


def strip_quotes(value: str) -> str:
    return value.strip(QUOTE_CHAR)


def extract_txt_content(data: List[str]) -> str:
    """Join TXT style data tokens into the record text.

    A single quoted string has its wrapping quotes removed; when several
    quoted segments are present every quote is kept so the segments stay
    distinguishable.

    Args:
        data: Data tokens after the record type

    Returns:
        Record text
    """
    if not data:
        return ""

    content = " ".join(data)
    if (len(content) >= 2 and content.startswith(QUOTE_CHAR)
            and content.endswith(QUOTE_CHAR) and content.count(QUOTE_CHAR) == 2):
        content = content[1:-1]
    return content


def remove_grouping_tokens(tokens: List[str]) -> List[str]:
    """Drop grouping parentheses left over from multi-line records.

    Bare ``(`` and ``)`` tokens are removed, as are an opening parenthesis
    attached to the first token and a closing one attached to the last.
    """
    tokens = [token for token in tokens if token not in (PAREN_OPEN, PAREN_CLOSE)]
    if tokens and tokens[0].startswith(PAREN_OPEN):
        tokens[0] = tokens[0][1:]
    if tokens and tokens[-1].endswith(PAREN_CLOSE):
        tokens[-1] = tokens[-1][:-1]
    return [token for token in tokens if token]
