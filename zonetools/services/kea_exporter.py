"""Kea DHCP reservation export from zone files.

Hosts carry their DHCP data in TXT records prefixed ``kea:``, e.g.::

    gw  IN  A    10.0.0.1
        IN  TXT  "kea: hw-address 1c:fd:08:7b:3c:18, client-classes [kids, test]"

Each such TXT record, paired with the host's first usable A record, becomes
one reservation. A records flagged ``inaddr`` are never used.
"""
import json
import logging
from datetime import datetime
from ipaddress import IPv4Network, ip_address
from typing import Callable, Dict, List, Optional, Union

from zonetools.models import ARecord, KeaReservation
from zonetools.services.zone_parser import ZoneParser


logger = logging.getLogger(__name__)


KEA_PREFIX = "kea:"

SUPPORTED_KEYS = frozenset({"hw-address", "client-classes"})


class KeaFormatError(ValueError):
    """Raised when a ``kea:`` TXT payload is malformed."""
    pass


def unescape_txt(text: str) -> str:
    return text.replace('\\\\', '\\').replace('\\"', '"')


def split_outside_brackets(text: str) -> List[str]:
    """Split on commas that are not inside ``[...]``.

    Args:
        text: Comma separated ``key value`` pairs

    Returns:
        Non-empty stripped parts

    Raises:
        KeaFormatError: If the brackets are unbalanced
    """
    parts = []
    level = 0
    start = 0

    for index, char in enumerate(text):
        if char == '[':
            level += 1
        elif char == ']':
            if level == 0:
                raise KeaFormatError(f"unbalanced ']' in: {text}")
            level -= 1
        elif char == ',' and level == 0:
            part = text[start:index].strip()
            if part:
                parts.append(part)
            start = index + 1

    if level > 0:
        raise KeaFormatError(f"unclosed '[' in: {text}")

    tail = text[start:].strip()
    if tail:
        parts.append(tail)
    return parts


def parse_bracket_list(value: str) -> List[str]:
    """Parse ``[a, "b", c]`` into a list of unquoted strings."""
    inner = value.strip()[1:-1]
    return [item.strip().strip('"') for item in inner.split(",") if item.strip()]


def parse_kea_txt(text: str) -> Optional[Dict[str, Union[str, List[str]]]]:
    """Parse the Kea directives of a TXT record.

    Args:
        text: TXT record text

    Returns:
        Mapping of Kea directive to value, or None if the record is not a
        ``kea:`` record or holds no ``key value`` pairs

    Raises:
        KeaFormatError: On unknown directives or malformed lists
    """
    if not text.startswith(KEA_PREFIX):
        return None

    payload = text[len(KEA_PREFIX):].strip()
    result = {}
    for pair in split_outside_brackets(payload):
        key_value = pair.split(None, 1)
        if len(key_value) != 2:
            return None
        key, value = key_value[0].strip(), key_value[1].strip()
        if key not in SUPPORTED_KEYS:
            raise KeaFormatError(f"unknown KEA directive '{key}'")

        if key == "client-classes":
            if not value.startswith("["):
                raise KeaFormatError(f"Missing '[' in client-classes: {value}")
            if not value.endswith("]"):
                raise KeaFormatError(f"Missing ']' in client-classes: {value}")
            result[key] = parse_bracket_list(value)
        else:
            result[key] = value

    return result or None


def normalize_mac_address(mac: str) -> str:
    """Lower case MAC address with separators removed, for comparison."""
    normalized = mac.lower()
    for separator in (":", "-", ".", " "):
        normalized = normalized.replace(separator, "")
    return normalized


class KeaExporter:
    """Collects Kea reservations from zone files."""

    def __init__(
        self,
        network: Optional[str] = None,
        parser_factory: Callable[[str], ZoneParser] = ZoneParser,
    ):
        """Initialize exporter.

        Args:
            network: Optional CIDR; only addresses inside it are exported
            parser_factory: Callable creating a ZoneParser for a file path

        Raises:
            ValueError: If the network is not a valid IPv4 CIDR
        """
        self.network = IPv4Network(network, strict=False) if network else None
        self.parser_factory = parser_factory
        self.reservations: List[KeaReservation] = []
        self.input_files: List[str] = []

    def find_valid_ip(self, a_records: List[ARecord]) -> Optional[str]:
        """First A record address that is not ``inaddr`` and is in the network."""
        for record in a_records:
            if record.inaddr:
                continue
            if self.network is None or record.address in self.network:
                return str(record.address)
        return None

    def add_zone(self, file_path: str) -> List[KeaReservation]:
        """Extract reservations from a zone file.

        Args:
            file_path: Zone file

        Returns:
            Reservations found in this file

        Raises:
            ParseError: If the zone cannot be parsed
            KeaFormatError: If a ``kea:`` record is malformed
        """
        parsed = self.parser_factory(file_path).parse()
        found = []

        for host in parsed.entries.hosts():
            address = self.find_valid_ip(host.records.a)
            if address is None:
                continue

            for txt in host.records.txt:
                try:
                    kea_data = parse_kea_txt(unescape_txt(txt.text))
                except KeaFormatError as e:
                    raise KeaFormatError(
                        f"error processing TXT record for {host.hostname}: {e}"
                    ) from e
                if kea_data is None:
                    continue
                found.append(KeaReservation(
                    hostname=host.hostname,
                    ip_address=address,
                    kea_data=kea_data,
                ))

        logger.info(f"Found {len(found)} Kea reservations in {file_path}")
        self.input_files.append(file_path)
        self.reservations.extend(found)
        return found

    def sorted_reservations(self, sort_by: Optional[str] = None) -> List[KeaReservation]:
        """Reservations in input order or sorted by hostname, ip or mac."""
        if sort_by is None:
            return list(self.reservations)
        if sort_by == "hostname":
            return sorted(self.reservations, key=lambda r: r.hostname)
        if sort_by == "ip":
            return sorted(self.reservations, key=lambda r: ip_address(r.ip_address))
        if sort_by == "mac":
            # Reservations without a MAC sort first
            return sorted(
                self.reservations,
                key=lambda r: (bool(r.hw_address), normalize_mac_address(r.hw_address)),
            )
        raise ValueError(f"unknown sort key: {sort_by}")

    def render(
        self,
        sort_by: Optional[str] = None,
        generated_at: Optional[datetime] = None,
        program: str = "zonetools mkkea",
    ) -> str:
        """Render reservations as a Kea ``reservations`` fragment.

        Args:
            sort_by: Optional sort key (hostname, ip or mac)
            generated_at: Timestamp for the header (defaults to now)
            program: Generator name written in the header

        Returns:
            Header comment followed by comma separated JSON objects, or an
            empty string when there are no reservations
        """
        reservations = self.sorted_reservations(sort_by)
        if not reservations:
            return ""

        generated_at = generated_at or datetime.now()
        lines = [
            f"// Generated by {program}",
            "// This file is auto-generated. Do not edit.",
            "//",
            f"// Generated on {generated_at.strftime('%a, %d %b %Y %H:%M:%S')}",
            f"// Input files: {', '.join(self.input_files)}",
        ]
        if self.network is not None:
            lines.extend(["//", f"// Network: {self.network}"])
        lines.extend(["//", ""])

        body = ",\n".join(json.dumps(r.to_dict(), indent=4) for r in reservations)
        return "\n".join(lines) + "\n" + body + "\n"
