"""Per-type RDATA field parsers.

Each parser takes the data tokens that follow the record type and returns
a typed record. Missing fields and malformed values raise RecordError;
nothing is recovered at the record level.
"""
import logging
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Callable, Dict, List

from zonetools.models import (
    ResourceRecord,
    ARecord,
    AAAARecord,
    CNAMERecord,
    MXRecord,
    TXTRecord,
    NSRecord,
    SOARecord,
    PTRRecord,
    SRVRecord,
    CAARecord,
    HINFORecord,
    NAPTRRecord,
    SPFRecord,
)
from zonetools.services.zone_lexer import (
    RecordError,
    extract_txt_content,
    is_inaddr_comment,
    parse_uint,
    qualify_domain_name,
    strip_quotes,
)


logger = logging.getLogger(__name__)

RecordParser = Callable[[List[str], str, ResourceRecord, str], ResourceRecord]

SOA_FIELDS = 7


def require_fields(rr_type: str, data: List[str], count: int) -> None:
    """Raise RecordError unless at least ``count`` data fields are present."""
    if len(data) < count:
        raise RecordError(
            f"{rr_type} record requires at least {count} field(s), got {len(data)}"
        )


def _parse_ip(value: str):
    try:
        return ip_address(value)
    except ValueError:
        return None


def parse_a(data: List[str], comment: str, base: ResourceRecord, origin: str) -> ARecord:
    """Parse an A record, flagging ``; inaddr`` comments."""
    if not data:
        raise RecordError("A record missing address")

    address = _parse_ip(data[0])
    if address is None:
        raise RecordError(f"invalid A record address: {data[0]}")
    if not isinstance(address, IPv4Address):
        raise RecordError(f"A record must be IPv4 address: {data[0]}")

    return ARecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        address=address,
        inaddr=bool(comment) and is_inaddr_comment(comment),
    )


def parse_aaaa(data: List[str], comment: str, base: ResourceRecord, origin: str) -> AAAARecord:
    if not data:
        raise RecordError("AAAA record missing address")

    address = _parse_ip(data[0])
    if address is None:
        raise RecordError(f"invalid AAAA record address: {data[0]}")
    if not isinstance(address, IPv6Address) or address.ipv4_mapped is not None:
        raise RecordError(f"AAAA record must be IPv6 address: {data[0]}")

    return AAAARecord(ttl=base.ttl, rr_class=base.rr_class, address=address)


def parse_cname(data: List[str], comment: str, base: ResourceRecord, origin: str) -> CNAMERecord:
    if not data:
        raise RecordError("CNAME record missing target")
    return CNAMERecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        target=qualify_domain_name(data[0], origin),
    )


def parse_mx(data: List[str], comment: str, base: ResourceRecord, origin: str) -> MXRecord:
    """Parse an MX record.

    A single token holding both fields (``"10 mail"``) is split on
    whitespace before giving up.
    """
    if len(data) == 1 and ' ' in data[0].strip():
        data = strip_quotes(data[0]).split()
    if len(data) < 2:
        raise RecordError("MX record requires priority and mail server")

    return MXRecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        priority=parse_uint(data[0], 16, "MX priority"),
        mail=qualify_domain_name(data[1], origin),
    )


def parse_txt(data: List[str], comment: str, base: ResourceRecord, origin: str) -> TXTRecord:
    if not data:
        raise RecordError("TXT record missing text")
    return TXTRecord(ttl=base.ttl, rr_class=base.rr_class, text=extract_txt_content(data))


def parse_ns(data: List[str], comment: str, base: ResourceRecord, origin: str) -> NSRecord:
    if not data:
        raise RecordError("NS record missing name server")
    return NSRecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        name_server=qualify_domain_name(data[0], origin),
    )


def parse_soa(data: List[str], comment: str, base: ResourceRecord, origin: str) -> SOARecord:
    """Parse an SOA record.

    Parentheses attached to any field are removed before counting fields.
    """
    fields = [token.strip("()") for token in data]
    fields = [token for token in fields if token]
    require_fields("SOA", fields, SOA_FIELDS)

    return SOARecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        primary_ns=qualify_domain_name(fields[0], origin),
        email=qualify_domain_name(fields[1], origin),
        serial=parse_uint(fields[2], 32, "SOA serial"),
        refresh=parse_uint(fields[3], 32, "SOA refresh"),
        retry=parse_uint(fields[4], 32, "SOA retry"),
        expire=parse_uint(fields[5], 32, "SOA expire"),
        minimum_ttl=parse_uint(fields[6], 32, "SOA minimum TTL"),
    )


def parse_ptr(data: List[str], comment: str, base: ResourceRecord, origin: str) -> PTRRecord:
    if not data:
        raise RecordError("PTR record missing pointer")
    return PTRRecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        pointer=qualify_domain_name(data[0], origin),
    )


def parse_srv(data: List[str], comment: str, base: ResourceRecord, origin: str) -> SRVRecord:
    require_fields("SRV", data, 4)
    return SRVRecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        priority=parse_uint(data[0], 16, "SRV priority"),
        weight=parse_uint(data[1], 16, "SRV weight"),
        port=parse_uint(data[2], 16, "SRV port"),
        target=qualify_domain_name(data[3], origin),
    )


def parse_caa(data: List[str], comment: str, base: ResourceRecord, origin: str) -> CAARecord:
    require_fields("CAA", data, 3)
    return CAARecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        flags=parse_uint(data[0], 8, "CAA flags"),
        tag=strip_quotes(data[1]),
        value=strip_quotes(data[2]),
    )


def parse_hinfo(data: List[str], comment: str, base: ResourceRecord, origin: str) -> HINFORecord:
    require_fields("HINFO", data, 2)
    return HINFORecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        cpu=strip_quotes(data[0]),
        os=strip_quotes(data[1]),
    )


def parse_naptr(data: List[str], comment: str, base: ResourceRecord, origin: str) -> NAPTRRecord:
    require_fields("NAPTR", data, 6)
    return NAPTRRecord(
        ttl=base.ttl,
        rr_class=base.rr_class,
        order=parse_uint(data[0], 16, "NAPTR order"),
        preference=parse_uint(data[1], 16, "NAPTR preference"),
        flags=strip_quotes(data[2]),
        service=strip_quotes(data[3]),
        regexp=strip_quotes(data[4]),
        replacement=qualify_domain_name(data[5], origin),
    )


def parse_spf(data: List[str], comment: str, base: ResourceRecord, origin: str) -> SPFRecord:
    if not data:
        raise RecordError("SPF record missing text")
    return SPFRecord(ttl=base.ttl, rr_class=base.rr_class, text=extract_txt_content(data))


RECORD_PARSERS: Dict[str, RecordParser] = {
    "A": parse_a,
    "AAAA": parse_aaaa,
    "CNAME": parse_cname,
    "MX": parse_mx,
    "TXT": parse_txt,
    "NS": parse_ns,
    "SOA": parse_soa,
    "PTR": parse_ptr,
    "SRV": parse_srv,
    "CAA": parse_caa,
    "HINFO": parse_hinfo,
    "NAPTR": parse_naptr,
    "SPF": parse_spf,
}


def parse_record_data(
    rr_type: str,
    data: List[str],
    comment: str,
    base: ResourceRecord,
    origin: str,
) -> ResourceRecord:
    """Dispatch record data to the parser for its type.

    Args:
        rr_type: Upper case record type
        data: Data tokens following the type
        comment: Line comment (without ``;``)
        base: TTL and class for the record
        origin: Origin used to qualify relative names

    Returns:
        Typed record

    Raises:
        RecordError: If the type is unsupported or the data is malformed
    """
    parser = RECORD_PARSERS.get(rr_type)
    if parser is None:
        raise RecordError(f"unsupported record type: {rr_type}")
    logger.debug(f"Parsing {rr_type} record data: {data}")
    return parser(data, comment, base, origin)
