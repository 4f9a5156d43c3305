"""$GENERATE directives for DHCP host ranges (dhcpgen).

A start and end address are split at /24 boundaries. The network and
broadcast octets (.0 and .255) are skipped, and hosts are numbered
sequentially across networks, e.g.::

    $GENERATE 10-254 dhcp-${-10,3,d}.example.com. IN A 10.1.50.$
"""
import logging
import re
from dataclasses import dataclass
from ipaddress import IPv4Address, AddressValueError
from typing import List

import dns.exception
import dns.name

from zonetools.services.generate import GenerateError


logger = logging.getLogger(__name__)


DNS_DOMAIN_PATTERN = re.compile(
    r'^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)*\.?$',
    re.IGNORECASE,
)
MAX_DOMAIN_LENGTH = 253

NETWORK_OCTET = 0
BROADCAST_OCTET = 255


@dataclass
class HostBlock:
    """Part of the address range inside a single /24 network."""
    network: str          # first three octets, e.g. "10.1.50"
    start_octet: int
    end_octet: int
    host_start: int

    @property
    def host_count(self) -> int:
        return self.end_octet - self.start_octet + 1


def is_valid_domain(domain: str) -> bool:
    """Check that a domain is a plain hostname-style DNS name.

    Args:
        domain: Domain name, optionally dot terminated

    Returns:
        True if the name is well formed
    """
    if len(domain) > MAX_DOMAIN_LENGTH or not DNS_DOMAIN_PATTERN.match(domain):
        return False
    try:
        dns.name.from_text(domain)
    except dns.exception.DNSException:
        return False
    return True


def field_width(max_value: int) -> int:
    return len(str(max_value))


def fqdn(host: str, domain: str) -> str:
    """Qualify a host with a domain; unchanged if absolute or no domain."""
    if host.endswith(".") or not domain:
        return host
    name = f"{host}.{domain}"
    if not name.endswith("."):
        name += "."
    return name


def parse_ipv4(address: str, what: str) -> IPv4Address:
    try:
        return IPv4Address(address)
    except AddressValueError as e:
        raise GenerateError(f"invalid {what} IP address: {address}") from e


def split_range(start: IPv4Address, end: IPv4Address, host_start: int) -> List[HostBlock]:
    """Split an address range into per-/24 blocks of usable host octets.

    Args:
        start: First address
        end: Last address (inclusive)
        host_start: Number of the first host

    Returns:
        Blocks in address order; networks without usable octets are omitted
    """
    blocks = []
    current = int(start)
    last = int(end)
    next_host = host_start

    while current <= last:
        base = current & 0xFFFFFF00
        start_octet = max(current & 0xFF, NETWORK_OCTET + 1)
        end_octet = min(min(base | 0xFF, last) & 0xFF, BROADCAST_OCTET - 1)

        if start_octet <= end_octet:
            network = str(IPv4Address(base)).rsplit(".", 1)[0]
            block = HostBlock(network, start_octet, end_octet, next_host)
            blocks.append(block)
            next_host += block.host_count

        current = base + 256

    return blocks


class DHCPRangeGenerator:
    """Generates $GENERATE directives for a range of DHCP addresses."""

    def __init__(
        self,
        hostname: str = "dhcp",
        host_start: int = 0,
        origin: str = "",
        mx: str = "",
        mx_priority: int = 0,
        comments: bool = False,
    ):
        """Initialize generator.

        Args:
            hostname: Host name prefix
            host_start: Number of the first host
            origin: Optional domain the host names are qualified with
            mx: Optional mail exchanger added for every host
            mx_priority: MX preference
            comments: Whether to write explanatory comments

        Raises:
            GenerateError: If an option is invalid
        """
        if not hostname:
            raise GenerateError("hostname cannot be empty")
        if host_start < 0:
            raise GenerateError(f"host start cannot be negative: {host_start}")
        if mx_priority < 0:
            raise GenerateError(f"MX priority cannot be negative: {mx_priority}")
        if origin and not is_valid_domain(origin):
            raise GenerateError(f"origin '{origin}' is not a valid DNS domain")

        self.hostname = hostname
        self.host_start = host_start
        self.origin = origin
        self.mx = mx
        self.mx_priority = mx_priority
        self.comments = comments

    def host_pattern(self, block: HostBlock, width: int) -> str:
        # The iterator runs over the last octet; shift it to the host number
        offset = block.host_start - block.start_octet
        return fqdn(f"{self.hostname}-${{{offset},{width},d}}", self.origin)

    def host_name(self, number: int, width: int) -> str:
        return f"{self.hostname}-{number:0{width}d}"

    def generate(self, start_ip: str, end_ip: str) -> List[str]:
        """Build the directives for an address range.

        Args:
            start_ip: First IPv4 address
            end_ip: Last IPv4 address (inclusive)

        Returns:
            Output lines in order

        Raises:
            GenerateError: If the addresses are invalid or the range holds
                no usable host address
        """
        start = parse_ipv4(start_ip, "start")
        end = parse_ipv4(end_ip, "end")
        if start > end:
            raise GenerateError("start IP must be less than or equal to end IP")

        blocks = split_range(start, end, self.host_start)
        total = sum(block.host_count for block in blocks)
        if total == 0:
            raise GenerateError(f"no valid host addresses in range {start_ip} to {end_ip}")

        width = field_width(self.host_start + total - 1)
        logger.debug(f"{total} hosts in {len(blocks)} networks, field width {width}")

        statements = []
        if self.comments:
            statements.append(
                f"; Creating $GENERATE directives for addresses {start_ip} through {end_ip}\n"
                f"; {total} hosts total, starting from host {self.host_start}"
            )

        for block in blocks:
            statements.extend(self._block_statements(block, width))

        return statements

    def _block_statements(self, block: HostBlock, width: int) -> List[str]:
        lines = []
        if self.comments:
            first_host = self.host_name(block.host_start, width)
            last_host = self.host_name(block.host_start + block.host_count - 1, width)
            lines.append(
                f"\n; {block.network}.{block.start_octet}-{block.network}.{block.end_octet}"
                f" => {first_host} to {last_host}, {block.host_count} hosts"
            )

        span = f"{block.start_octet}-{block.end_octet}"
        owner = self.host_pattern(block, width)
        lines.append(f"$GENERATE {span} {owner} IN A {block.network}.$")
        if self.mx:
            lines.append(
                f'$GENERATE {span} {owner} IN MX "{self.mx_priority} {fqdn(self.mx, self.origin)}"'
            )
        return lines


def generate_dhcp_range(
    start_ip: str,
    end_ip: str,
    hostname: str = "dhcp",
    host_start: int = 0,
    origin: str = "",
    mx: str = "",
    mx_priority: int = 0,
    comments: bool = False,
) -> str:
    """Generate the $GENERATE text for a DHCP range.

    Returns:
        Directives joined by newlines, with a trailing newline
    """
    generator = DHCPRangeGenerator(
        hostname=hostname,
        host_start=host_start,
        origin=origin,
        mx=mx,
        mx_priority=mx_priority,
        comments=comments,
    )
    return "\n".join(generator.generate(start_ip, end_ip)) + "\n"
