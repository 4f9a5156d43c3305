"""Zone file parser for BIND style DNS master files.

Reads a zone file top to bottom, follows $INCLUDE directives depth first and
builds an ordered list of zone entries. Records sharing an owner name are
grouped into a single host entry at the position where the name was first
seen. Parsing is fail fast: the first error aborts the whole parse.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from zonetools.models import (
    GenerateDirective,
    GenerateEntry,
    HostRecord,
    IncludeEntry,
    OriginEntry,
    ParsedZone,
    RecordEntry,
    ResourceRecord,
    TTLEntry,
    ZoneEntries,
    ZoneMetadata,
)
from zonetools.services.record_parsers import parse_record_data
from zonetools.services.zone_lexer import (
    CLASS_IN,
    COMMENT_CHAR,
    RecordError,
    contains_unquoted_parenthesis,
    is_class,
    is_known_rr_type,
    is_numeric,
    join_continuation,
    paren_balance,
    parse_uint,
    qualify_domain_name,
    remove_grouping_tokens,
    split_comment,
    strip_quotes,
    tokenize,
)


logger = logging.getLogger(__name__)


DEFAULT_TTL = 86400
DEFAULT_MAX_INCLUDE_DEPTH = 16


class ParseError(Exception):
    """Raised when zone file parsing fails.

    Attributes:
        file_path: File being parsed when the error occurred
        line_number: 1-based line number, or None for file level errors
        raw_line: Offending source line, if any
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        raw_line: Optional[str] = None,
    ):
        self.message = message
        self.file_path = file_path
        self.line_number = line_number
        self.raw_line = raw_line
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.file_path or "<zone>"
        if self.line_number is not None:
            location = f"{location}:{self.line_number}"
        return f"{location}: {self.message}"


@dataclass
class ParserState:
    """Mutable state for one parse.

    A fresh state is created for every parse() call, so parser instances
    never share state between parses.
    """
    origin: str = ""
    ttl: int = DEFAULT_TTL
    origin_found: bool = False
    entries: ZoneEntries = field(default_factory=ZoneEntries)
    hosts: Dict[str, HostRecord] = field(default_factory=dict)
    include_depth: int = 0


@dataclass
class LogicalLine:
    """A record or directive after multi-line reassembly."""
    line_number: int
    raw_line: str
    content: str
    comment: str

    @property
    def starts_with_blank(self) -> bool:
        return self.raw_line[:1] in (' ', '\t')


class ZoneParser:
    """Parser for DNS zone files."""

    def __init__(
        self,
        file_path: str,
        default_ttl: int = DEFAULT_TTL,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
        encoding: str = "utf-8",
    ):
        """Initialize parser.

        Args:
            file_path: Top level zone file
            default_ttl: TTL applied before any $TTL directive
            max_include_depth: Maximum $INCLUDE nesting
            encoding: Text encoding of the zone files
        """
        self.file_path = file_path
        self.default_ttl = default_ttl
        self.max_include_depth = max_include_depth
        self.encoding = encoding

    def parse(self) -> ParsedZone:
        """Parse the zone file and everything it includes.

        Returns:
            ParsedZone with the ordered entries and the zone metadata

        Raises:
            ParseError: On the first I/O, syntax or structural error
        """
        state = ParserState(ttl=self.default_ttl)
        self._parse_file(self.file_path, state)

        if not state.origin_found:
            raise ParseError("no $ORIGIN directive found", self.file_path)

        metadata = ZoneMetadata(origin=state.origin, ttl=state.ttl)
        logger.info(
            f"Parsed {self.file_path}: {len(state.entries)} entries, "
            f"{len(state.hosts)} hosts"
        )
        return ParsedZone(entries=state.entries, metadata=metadata)

    def _parse_file(self, file_path: str, state: ParserState) -> None:
        """Parse one file (top level or included) into the shared state."""
        logger.debug(f"Starting to parse file: {file_path}")
        current_name: Optional[str] = None

        try:
            with open(file_path, "r", encoding=self.encoding) as f:
                for logical in self._logical_lines(f, file_path):
                    if logical.content.startswith("$"):
                        self._handle_directive(logical, file_path, state)
                    else:
                        current_name = self._parse_record(
                            logical, file_path, current_name, state
                        )
        except OSError as e:
            raise ParseError(f"cannot read zone file: {e}", file_path) from e
        except UnicodeDecodeError as e:
            raise ParseError(f"cannot decode zone file: {e}", file_path) from e

        logger.debug(f"Finished parsing file: {file_path}")

    def _logical_lines(self, lines, file_path: str) -> Iterator[LogicalLine]:
        """Yield comment-stripped lines with parenthesised records joined.

        Args:
            lines: Iterable of physical lines
            file_path: File name for error messages

        Yields:
            LogicalLine for every non-blank, non-comment record or directive
        """
        numbered = enumerate(lines, start=1)
        for line_number, raw in numbered:
            raw = raw.rstrip("\r\n")
            stripped = raw.strip()
            if not stripped or stripped.startswith(COMMENT_CHAR):
                continue

            content, comment = split_comment(raw)
            if contains_unquoted_parenthesis(content):
                content = self._join_multi_line(
                    content, numbered, file_path, line_number, raw
                )

            yield LogicalLine(
                line_number=line_number,
                raw_line=raw,
                content=content,
                comment=comment,
            )

    def _join_multi_line(
        self,
        content: str,
        numbered: Iterator[Tuple[int, str]],
        file_path: str,
        start_line: int,
        raw: str,
    ) -> str:
        """Accumulate continuation lines until parentheses balance."""
        logger.debug(f"Handling multi-line record starting at line {start_line}")
        balance = paren_balance(content)

        while balance > 0:
            try:
                line_number, next_raw = next(numbered)
            except StopIteration:
                raise ParseError(
                    "unterminated parenthesis in multi-line record",
                    file_path,
                    start_line,
                    raw,
                ) from None

            next_content, _ = split_comment(next_raw)
            if not next_content:
                continue

            logger.debug(f"Adding line {line_number} to multi-line record: {next_content}")
            content = join_continuation(content, next_content)
            balance += paren_balance(next_content)

        logger.debug(f"Multi-line record result: {content}")
        return content

    def _handle_directive(
        self, logical: LogicalLine, file_path: str, state: ParserState
    ) -> None:
        """Process $TTL, $ORIGIN, $INCLUDE and $GENERATE."""
        parts = tokenize(logical.content)
        directive = parts[0].upper()
        logger.debug(f"Handling directive: {logical.content}")

        def fail(message: str) -> ParseError:
            return ParseError(message, file_path, logical.line_number, logical.raw_line)

        if len(parts) < 2:
            raise fail(f"incomplete directive: {logical.content}")

        if directive == "$TTL":
            try:
                state.ttl = parse_uint(parts[1], 32, "TTL value")
            except RecordError as e:
                raise fail(str(e)) from e
            state.entries.append(TTLEntry(
                raw_line=logical.raw_line,
                source_file=file_path,
                value=state.ttl,
            ))

        elif directive == "$ORIGIN":
            origin = parts[1]
            if not origin.endswith("."):
                origin += "."
            state.origin = origin
            state.origin_found = True
            state.entries.append(OriginEntry(
                raw_line=logical.raw_line,
                source_file=file_path,
                domain=origin,
            ))

        elif directive == "$INCLUDE":
            self._handle_include(parts[1], logical, file_path, state)

        elif directive == "$GENERATE":
            try:
                generate = self._parse_generate(parts[1:], state)
            except RecordError as e:
                raise fail(str(e)) from e
            state.entries.append(GenerateEntry(
                raw_line=logical.raw_line,
                source_file=file_path,
                directive=generate,
            ))

        else:
            raise fail(f"unknown directive: {parts[0]}")

    def _handle_include(
        self, target: str, logical: LogicalLine, file_path: str, state: ParserState
    ) -> None:
        """Record an $INCLUDE entry, then parse the included file in place."""
        include_path = strip_quotes(target)
        if not os.path.isabs(include_path):
            include_path = os.path.join(os.path.dirname(file_path), include_path)

        if state.include_depth >= self.max_include_depth:
            raise ParseError(
                f"$INCLUDE nesting deeper than {self.max_include_depth}: {include_path}",
                file_path,
                logical.line_number,
                logical.raw_line,
            )

        logger.debug(f"Including file: {include_path}")
        state.entries.append(IncludeEntry(
            raw_line=logical.raw_line,
            source_file=file_path,
            filename=include_path,
        ))

        state.include_depth += 1
        try:
            self._parse_file(include_path, state)
        except ParseError as e:
            raise ParseError(
                f"error parsing included file {include_path}: {e}",
                file_path,
                logical.line_number,
                logical.raw_line,
            ) from e
        finally:
            state.include_depth -= 1

    def _parse_generate(self, args: List[str], state: ParserState) -> GenerateDirective:
        """Capture ``range owner [ttl] [class] type rdata...`` verbatim."""
        if len(args) < 4:
            raise RecordError("invalid $GENERATE format: expected range, owner, type and rdata")

        range_part, owner = args[0], args[1]
        rest = args[2:]
        ttl = state.ttl
        rr_class = CLASS_IN

        if rest and is_numeric(rest[0]) and len(rest) > 2:
            ttl = int(rest[0])
            rest = rest[1:]
        if rest and is_class(rest[0]) and len(rest) > 2:
            rr_class = rest[0].upper()
            rest = rest[1:]

        if len(rest) < 2:
            raise RecordError("invalid $GENERATE format: missing type or rdata")
        if not is_known_rr_type(rest[0]):
            raise RecordError(f"unsupported $GENERATE record type: {rest[0]}")

        return GenerateDirective(
            range=range_part,
            owner_name=owner,
            rr_type=rest[0].upper(),
            rdata=" ".join(strip_quotes(part) for part in rest[1:]),
            ttl=ttl,
            rr_class=rr_class,
            origin=state.origin,
        )

    def _parse_record(
        self,
        logical: LogicalLine,
        file_path: str,
        current_name: Optional[str],
        state: ParserState,
    ) -> Optional[str]:
        """Parse one resource record line and merge it into its host entry.

        Args:
            logical: Reassembled record line
            file_path: File holding the line
            current_name: Owner name of the previous record in this file
            state: Parser state

        Returns:
            Owner name to inherit for following blank-owner lines
        """
        def fail(message: str) -> ParseError:
            return ParseError(message, file_path, logical.line_number, logical.raw_line)

        parts = tokenize(logical.content)
        if not parts:
            return current_name

        if logical.starts_with_blank or self._is_keyword(parts[0]):
            if current_name is None:
                raise fail(f"no previous hostname for record: {logical.content}")
            hostname = current_name
        else:
            hostname = parts[0]
            parts = parts[1:]

        index = 0
        ttl = state.ttl
        if index < len(parts) and is_numeric(parts[index]):
            ttl = int(parts[index])
            index += 1

        rr_class = CLASS_IN
        if index < len(parts) and is_class(parts[index]):
            rr_class = parts[index].upper()
            index += 1

        if index >= len(parts) or not is_known_rr_type(parts[index]):
            raise fail(f"invalid or missing record type in: {logical.content}")
        rr_type = parts[index].upper()
        data = remove_grouping_tokens(parts[index + 1:])

        qualified = qualify_domain_name(hostname, state.origin)
        logger.debug(
            f"Parsed record: hostname={qualified}, ttl={ttl}, class={rr_class}, "
            f"type={rr_type}, data={data}"
        )

        base = ResourceRecord(ttl=ttl, rr_class=rr_class)
        try:
            record = parse_record_data(rr_type, data, logical.comment, base, state.origin)
        except RecordError as e:
            raise fail(str(e)) from e

        self._host_for(qualified, logical, file_path, state).records.add(rr_type, record)
        return qualified

    @staticmethod
    def _is_keyword(token: str) -> bool:
        """Upper case class or type names in column one stand for a blank owner."""
        return token.isupper() and (is_class(token) or is_known_rr_type(token))

    @staticmethod
    def _host_for(
        hostname: str, logical: LogicalLine, file_path: str, state: ParserState
    ) -> HostRecord:
        """Find the host entry for a name, creating it at the end if new."""
        host = state.hosts.get(hostname)
        if host is None:
            host = HostRecord(hostname=hostname)
            state.hosts[hostname] = host
            state.entries.append(RecordEntry(
                raw_line=logical.raw_line,
                source_file=file_path,
                host=host,
            ))
        return host


def parse_zone_file(
    file_path: str,
    default_ttl: int = DEFAULT_TTL,
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
    encoding: str = "utf-8",
) -> ParsedZone:
    """Parse a zone file with a fresh ZoneParser.

    Args:
        file_path: Top level zone file
        default_ttl: TTL applied before any $TTL directive
        max_include_depth: Maximum $INCLUDE nesting
        encoding: Text encoding of the zone files

    Returns:
        ParsedZone

    Raises:
        ParseError: If the zone or an included file cannot be parsed
    """
    parser = ZoneParser(
        file_path,
        default_ttl=default_ttl,
        max_include_depth=max_include_depth,
        encoding=encoding,
    )
    return parser.parse()
