"""Zone entry data models.

A parsed zone is an ordered list of entries mirroring the order in which
records and directives first appear in the zone file (and its includes).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional

from .zone_record import HostRecord


class EntryType(Enum):
    """Kind of zone entry."""
    RECORD = "record"
    GENERATE = "generate"
    TTL = "ttl"
    ORIGIN = "origin"
    INCLUDE = "include"


@dataclass
class GenerateDirective:
    """A $GENERATE directive captured verbatim.

    Attributes:
        range: Iteration range, ``start-stop`` or ``start-stop/step``
        owner_name: Owner name template (``$`` and ``${...}`` placeholders)
        rr_type: Record type generated
        rdata: RDATA template
        ttl: TTL in force when the directive was read
        rr_class: Class in force when the directive was read
        origin: Origin in force when the directive was read
    """
    range: str
    owner_name: str
    rr_type: str
    rdata: str
    ttl: int
    rr_class: str = "IN"
    origin: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "range": self.range,
            "owner_name": self.owner_name,
            "rr_type": self.rr_type,
            "rdata": self.rdata,
            "ttl": self.ttl,
            "class": self.rr_class,
            "origin": self.origin,
        }


@dataclass
class ZoneEntry:
    """Base for every zone entry.

    Attributes:
        raw_line: Source line the entry came from, for diagnostics
        source_file: Path of the file holding the line
    """
    raw_line: str
    source_file: str

    entry_type = None

    def payload(self) -> dict:
        return {}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        result = {
            "type": self.entry_type.value,
            "raw_line": self.raw_line,
            "source_file": self.source_file,
        }
        result.update(self.payload())
        return result


@dataclass
class RecordEntry(ZoneEntry):
    host: HostRecord = None

    entry_type = EntryType.RECORD

    def payload(self) -> dict:
        return {"host": self.host.to_dict()}


@dataclass
class GenerateEntry(ZoneEntry):
    directive: GenerateDirective = None

    entry_type = EntryType.GENERATE

    def payload(self) -> dict:
        return {"generate": self.directive.to_dict()}


@dataclass
class TTLEntry(ZoneEntry):
    value: int = 0

    entry_type = EntryType.TTL

    def payload(self) -> dict:
        return {"ttl": self.value}


@dataclass
class OriginEntry(ZoneEntry):
    domain: str = ""

    entry_type = EntryType.ORIGIN

    def payload(self) -> dict:
        return {"origin": self.domain}


@dataclass
class IncludeEntry(ZoneEntry):
    filename: str = ""

    entry_type = EntryType.INCLUDE

    def payload(self) -> dict:
        return {"include": self.filename}


@dataclass
class ZoneMetadata:
    """Zone level information known at the end of a parse.

    Attributes:
        origin: Last $ORIGIN seen (dot terminated)
        ttl: Default TTL in force at the end of the parse
    """
    origin: str = ""
    ttl: int = 86400

    def to_dict(self) -> dict:
        return {"origin": self.origin, "ttl": self.ttl}


class ZoneEntries(list):
    """Ordered list of zone entries with hostname lookup helpers."""

    def hosts(self) -> List[HostRecord]:
        """Host records in entry order."""
        return [entry.host for entry in self if isinstance(entry, RecordEntry)]

    def of_type(self, entry_type: EntryType) -> List[ZoneEntry]:
        return [entry for entry in self if entry.entry_type is entry_type]

    def find_host(self, hostname: str) -> Optional[HostRecord]:
        """Find the host record for a fully qualified hostname.

        Args:
            hostname: Dot terminated hostname

        Returns:
            HostRecord or None if the zone has no records for the name
        """
        for host in self.hosts():
            if host.hostname == hostname:
                return host
        return None

    def to_list(self) -> List[dict]:
        return [entry.to_dict() for entry in self]


class ParsedZone(NamedTuple):
    """Result of parsing a zone file."""
    entries: ZoneEntries
    metadata: ZoneMetadata

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata.to_dict(),
            "entries": self.entries.to_list(),
        }
