"""Reverse (in-addr.arpa) zone generation from forward zone files."""
import logging
import os
import socket
from datetime import datetime
from typing import Callable, List, Optional

import dns.name
import dns.reversename

from zonetools.models import (
    GenerateDirective,
    GenerateEntry,
    IncludeEntry,
    RecordEntry,
    SOARecord,
    TTLEntry,
)
from zonetools.services.generate import format_range, parse_range
from zonetools.services.zone_lexer import qualify_domain_name
from zonetools.services.zone_parser import ZoneParser


logger = logging.getLogger(__name__)


BANNER = ";" * 77


class ReverseZoneError(Exception):
    """Raised when a reverse zone cannot be built."""
    pass


class ReverseZoneBuilder:
    """Builds a reverse zone from one or more forward zones.

    A records flagged ``inaddr`` are left out. The SOA is taken from the
    first forward zone that has one and the name servers from every zone
    apex, without duplicates.
    """

    def __init__(
        self,
        reverse_origin: str,
        parser_factory: Callable[[str], ZoneParser] = ZoneParser,
    ):
        """Initialize builder.

        Args:
            reverse_origin: Reverse zone name, e.g. ``1.168.192.in-addr.arpa``
            parser_factory: Callable creating a ZoneParser for a file path

        Raises:
            ReverseZoneError: If the origin is not below in-addr.arpa
        """
        if not reverse_origin.endswith("."):
            reverse_origin += "."
        origin_name = dns.name.from_text(reverse_origin)
        if not origin_name.is_subdomain(dns.reversename.ipv4_reverse_domain):
            raise ReverseZoneError(f"not an in-addr.arpa domain: {reverse_origin}")

        self.reverse_origin = origin_name.to_text()
        self.parser_factory = parser_factory
        self._origin_name = origin_name
        self.soa: Optional[SOARecord] = None
        self.ttl: Optional[int] = None
        self.name_servers: List[str] = []
        self.input_files: List[str] = []
        self._lines: List[str] = []

    @property
    def ptr_count(self) -> int:
        return sum(1 for line in self._lines if "\tPTR\t" in line)

    def add_zone(self, file_path: str) -> None:
        """Parse a forward zone and add its PTR records.

        Args:
            file_path: Forward zone file

        Raises:
            ParseError: If the forward zone cannot be parsed
        """
        parsed = self.parser_factory(file_path).parse()
        self.input_files.append(file_path)

        for entry in parsed.entries:
            if isinstance(entry, TTLEntry):
                if self.ttl is None:
                    self.ttl = entry.value
            elif isinstance(entry, IncludeEntry):
                self._lines.append(f"\n; Processed from $INCLUDE file {entry.filename}")
            elif isinstance(entry, GenerateEntry):
                converted = self.convert_generate(entry.directive)
                if converted:
                    self._lines.append(converted)
            elif isinstance(entry, RecordEntry):
                self._add_host(entry.host)

        if self.ttl is None:
            self.ttl = parsed.metadata.ttl

    def _add_host(self, host) -> None:
        records = host.records
        if records.soa:
            if self.soa is None:
                self.soa = records.soa[0]
            for ns in records.ns:
                if ns.name_server not in self.name_servers:
                    self.name_servers.append(ns.name_server)

        for a in records.a:
            if a.inaddr:
                logger.debug(f"Skipping {host.hostname} {a.address}: marked inaddr")
                continue
            label = self.reverse_label(str(a.address))
            if label is None:
                logger.debug(f"Skipping {host.hostname} {a.address}: outside {self.reverse_origin}")
                continue
            self._lines.append(f"{label}\t\tIN\tPTR\t\t{host.hostname}")

    def reverse_label(self, address: str) -> Optional[str]:
        """Owner name of an address's PTR record relative to the reverse origin.

        Args:
            address: IPv4 address

        Returns:
            Relative label, ``@`` for the origin itself, or None if the
            address is outside the reverse zone
        """
        reverse = dns.reversename.from_address(address)
        if not reverse.is_subdomain(self._origin_name):
            return None
        if reverse == self._origin_name:
            return "@"
        return reverse.relativize(self._origin_name).to_text()

    def convert_generate(self, directive: GenerateDirective) -> Optional[str]:
        """Convert an A record $GENERATE into the matching PTR $GENERATE.

        Args:
            directive: Directive captured from the forward zone

        Returns:
            PTR $GENERATE line, or None if the directive is not an A
            record directive or its addresses fall outside the reverse zone

        Raises:
            GenerateError: If the range is malformed
            ReverseZoneError: If the RDATA is not a dotted quad template
        """
        if directive.rr_type != "A":
            return None

        octets = directive.rdata.split(".")
        if len(octets) != 4:
            raise ReverseZoneError(f"invalid IP address template in $GENERATE: {directive.rdata}")

        span = parse_range(directive.range)
        reverse = ".".join(reversed(octets)) + ".in-addr.arpa."
        suffix = "." + self.reverse_origin
        if reverse == self.reverse_origin:
            owner = "@"
        elif reverse.endswith(suffix):
            owner = reverse[:-len(suffix)]
        else:
            logger.debug(f"Skipping $GENERATE {directive.range}: outside {self.reverse_origin}")
            return None

        target = qualify_domain_name(directive.owner_name, directive.origin)
        return (
            f"$GENERATE {format_range(span.start, span[-1], span.step)} "
            f"{owner} IN PTR {target}"
        )

    def render(self, generated_at: Optional[datetime] = None) -> str:
        """Render the reverse zone text.

        Args:
            generated_at: Timestamp for the header (defaults to now)

        Returns:
            Zone file text

        Raises:
            ReverseZoneError: If no forward zone supplied an SOA record
        """
        if self.soa is None:
            raise ReverseZoneError("no SOA record found in input zones")

        generated_at = generated_at or datetime.now()
        try:
            host = socket.gethostname()
        except OSError:
            host = "<unknown>"

        out = [
            BANNER,
            f"; Reverse zone file for domain '{self.reverse_origin}'",
            ";",
            "; DO NOT EDIT THIS FILE; it is not manually updated",
            ";",
            f"; Generated {generated_at.strftime('%a %b %d %H:%M:%S %Y')} from:",
        ]
        for input_file in self.input_files:
            out.append(f";  {host}:{os.path.abspath(input_file)}")
        out.append(BANNER)
        out.append(f"$TTL {self.ttl}")
        out.extend(self._soa_lines())
        out.append("")
        out.append(f"$ORIGIN {self.reverse_origin}")
        out.append("")
        out.extend(self._lines)
        return "\n".join(out) + "\n"

    def _soa_lines(self) -> List[str]:
        soa = self.soa
        lines = [
            f"@\tIN\tSOA\t{soa.primary_ns}\t{soa.email} (",
            f"\t\t\t\t{soa.serial}\t ; Serial",
            f"\t\t\t\t{soa.refresh}\t\t ; Refresh",
            f"\t\t\t\t{soa.retry}\t\t ; Retry",
            f"\t\t\t\t{soa.expire}\t\t ; Expire",
            f"\t\t\t\t{soa.minimum_ttl} )\t\t ; Minimum",
        ]
        for ns in self.name_servers:
            lines.append(f"\t\tIN\tNS\t{ns}")
        return lines


def build_reverse_zone(reverse_origin: str, zone_files: List[str]) -> str:
    """Build reverse zone text from forward zone files.

    Args:
        reverse_origin: Reverse zone name
        zone_files: Forward zone files, processed in order

    Returns:
        Reverse zone file text
    """
    builder = ReverseZoneBuilder(reverse_origin)
    for zone_file in zone_files:
        builder.add_zone(zone_file)
    logger.info(f"Built {builder.reverse_origin} with {builder.ptr_count} PTR records")
    return builder.render()
