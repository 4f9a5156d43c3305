"""Zone text output for parsed zones."""
from typing import List

from zonetools.models import (
    DNSRecords,
    GenerateEntry,
    HostRecord,
    IncludeEntry,
    OriginEntry,
    RecordEntry,
    TTLEntry,
    ZoneEntries,
    ZoneMetadata,
)


def format_hostname(hostname: str, origin: str) -> str:
    """Format a hostname relative to the origin.

    Args:
        hostname: Fully qualified hostname
        origin: Zone origin

    Returns:
        ``@`` for the origin, the relative part for names below the origin,
        otherwise the hostname unchanged
    """
    if hostname == origin:
        return "@"

    suffix = "." + origin
    if origin and hostname.endswith(suffix):
        return hostname[:-len(suffix)]

    return hostname


def has_any_records(records: DNSRecords) -> bool:
    return not records.is_empty()


def format_host_records(host: HostRecord, origin: str) -> str:
    """Format all records of a host as zone file lines.

    Records are written grouped by type: SOA, NS, A, AAAA, CNAME, MX, TXT,
    PTR, SRV, CAA, HINFO, NAPTR, SPF. A blank line follows a host that has
    any records.

    Args:
        host: Host record to format
        origin: Origin used to shorten the owner name

    Returns:
        Zone file text (empty if the host has no records)
    """
    records = host.records
    if not has_any_records(records):
        return ""

    owner = format_hostname(host.hostname, origin)
    lines: List[str] = []

    for soa in records.soa:
        lines.append(f"{owner}\t{soa.rr_class}\tSOA\t{soa.primary_ns} {soa.email} (")
        lines.append(f"\t\t\t\t\t{soa.serial}\t; Serial")
        lines.append(f"\t\t\t\t\t{soa.refresh}\t; Refresh")
        lines.append(f"\t\t\t\t\t{soa.retry}\t; Retry")
        lines.append(f"\t\t\t\t\t{soa.expire}\t; Expire")
        lines.append(f"\t\t\t\t\t{soa.minimum_ttl} )\t; Minimum TTL")

    for ns in records.ns:
        lines.append(f"{owner}\t{ns.rr_class}\tNS\t{ns.name_server}")

    for a in records.a:
        comment = "\t; inaddr" if a.inaddr else ""
        lines.append(f"{owner}\t{a.rr_class}\tA\t{a.address}{comment}")

    for aaaa in records.aaaa:
        lines.append(f"{owner}\t{aaaa.rr_class}\tAAAA\t{aaaa.address}")

    for cname in records.cname:
        lines.append(f"{owner}\t{cname.rr_class}\tCNAME\t{cname.target}")

    for mx in records.mx:
        lines.append(f"{owner}\t{mx.rr_class}\tMX\t{mx.priority} {mx.mail}")

    for txt in records.txt:
        lines.append(f"{owner}\t{txt.rr_class}\tTXT\t{_quoted(txt.text)}")

    for ptr in records.ptr:
        lines.append(f"{owner}\t{ptr.rr_class}\tPTR\t{ptr.pointer}")

    for srv in records.srv:
        lines.append(
            f"{owner}\t{srv.rr_class}\tSRV\t{srv.priority} {srv.weight} {srv.port} {srv.target}"
        )

    for caa in records.caa:
        lines.append(f'{owner}\t{caa.rr_class}\tCAA\t{caa.flags} {caa.tag} "{caa.value}"')

    for hinfo in records.hinfo:
        lines.append(f'{owner}\t{hinfo.rr_class}\tHINFO\t"{hinfo.cpu}" "{hinfo.os}"')

    for naptr in records.naptr:
        lines.append(
            f'{owner}\t{naptr.rr_class}\tNAPTR\t{naptr.order} {naptr.preference} '
            f'"{naptr.flags}" "{naptr.service}" "{naptr.regexp}" {naptr.replacement}'
        )

    for spf in records.spf:
        lines.append(f"{owner}\t{spf.rr_class}\tSPF\t{_quoted(spf.text)}")

    return "\n".join(lines) + "\n\n"


def _quoted(text: str) -> str:
    # Multi-segment text already carries its own quotes
    if text.startswith('"') and text.endswith('"') and len(text) >= 2:
        return text
    return f'"{text}"'


def format_zone(entries: ZoneEntries, metadata: ZoneMetadata) -> str:
    """Regenerate zone text from a parsed zone, in entry order.

    The zone origin and TTL are written once at the top from the metadata.
    $TTL entries are not repeated; an $ORIGIN entry is written only when it
    changes the origin, and owners are shortened against the origin in force.

    Args:
        entries: Parsed zone entries
        metadata: Zone metadata

    Returns:
        Zone file text
    """
    parts = [f"$ORIGIN {metadata.origin}\n", f"$TTL {metadata.ttl}\n\n"]
    origin = metadata.origin

    for entry in entries:
        if isinstance(entry, RecordEntry):
            parts.append(format_host_records(entry.host, origin))
        elif isinstance(entry, TTLEntry):
            continue
        elif isinstance(entry, OriginEntry):
            if entry.domain != origin:
                origin = entry.domain
                parts.append(f"$ORIGIN {origin}\n")
        elif isinstance(entry, IncludeEntry):
            # Included records follow inline
            parts.append(f"; $INCLUDE {entry.filename}\n")
        elif isinstance(entry, GenerateEntry):
            gen = entry.directive
            parts.append(
                f'$GENERATE {gen.range} {gen.owner_name} {gen.rr_class} '
                f'{gen.rr_type} "{gen.rdata}"\n'
            )

    return "".join(parts)
