"""$GENERATE range and placeholder helpers.

The zone parser captures $GENERATE directives verbatim; these helpers are
for consumers that need to expand them.
"""
import re
from typing import List, Tuple

from zonetools.models import GenerateDirective
from zonetools.services.zone_lexer import qualify_domain_name


class GenerateError(ValueError):
    """Raised when a $GENERATE range or template is malformed."""
    pass


RANGE_PATTERN = re.compile(r'^(\d+)-(\d+)(?:/(\d+))?$')

# ${offset[,width[,base]]}
PLACEHOLDER_PATTERN = re.compile(r'\$\{(-?\d+)(?:,(\d+)(?:,([doxX]))?)?\}')

ESCAPED_DOLLAR = "\\$"
_DOLLAR_MARKER = "\x00"

BASE_FORMATS = {"d": "d", "o": "o", "x": "x", "X": "X"}


def parse_range(range_text: str) -> range:
    """Parse a ``start-stop[/step]`` range.

    Args:
        range_text: Range as written in the directive

    Returns:
        Inclusive range object

    Raises:
        GenerateError: If the range is malformed or empty
    """
    match = RANGE_PATTERN.match(range_text)
    if not match:
        raise GenerateError(f"invalid $GENERATE range: {range_text}")

    start, stop = int(match.group(1)), int(match.group(2))
    step = int(match.group(3)) if match.group(3) else 1
    if step == 0:
        raise GenerateError(f"invalid $GENERATE step in range: {range_text}")
    if start > stop:
        raise GenerateError(f"$GENERATE range start exceeds stop: {range_text}")
    return range(start, stop + 1, step)


def format_range(start: int, stop: int, step: int = 1) -> str:
    if step != 1:
        return f"{start}-{stop}/{step}"
    return f"{start}-{stop}"


def replace_placeholders(template: str, iteration: int) -> str:
    """Substitute the iterator into a $GENERATE template.

    ``${offset,width,base}`` is replaced by ``iteration + offset`` formatted
    in the given base (d, o, x or X) and zero padded to ``width``; a bare
    ``$`` is replaced by the iterator and ``\\$`` is a literal dollar sign.

    Args:
        template: Owner or RDATA template
        iteration: Current iterator value

    Returns:
        Expanded text
    """
    def expand(match: re.Match) -> str:
        value = iteration + int(match.group(1))
        width = int(match.group(2) or 0)
        base = BASE_FORMATS[match.group(3) or "d"]
        if value < 0:
            raise GenerateError(f"negative $GENERATE value in {match.group(0)}")
        return format(value, f"0{width}{base}" if width else base)

    result = template.replace(ESCAPED_DOLLAR, _DOLLAR_MARKER)
    result = PLACEHOLDER_PATTERN.sub(expand, result)
    result = result.replace("$", str(iteration))
    return result.replace(_DOLLAR_MARKER, "$")


def expand_generate(directive: GenerateDirective) -> List[Tuple[str, str]]:
    """Expand a $GENERATE directive into (owner, rdata) pairs.

    Owners are qualified with the origin that was in force when the
    directive was read.

    Args:
        directive: Captured directive

    Returns:
        List of (fully qualified owner, rdata) tuples in iteration order
    """
    pairs = []
    for iteration in parse_range(directive.range):
        owner = replace_placeholders(directive.owner_name, iteration)
        rdata = replace_placeholders(directive.rdata, iteration)
        pairs.append((qualify_domain_name(owner, directive.origin), rdata))
    return pairs
