"""Typed DNS resource record data models."""
from dataclasses import dataclass, field, fields
from ipaddress import IPv4Address, IPv6Address
from typing import List


@dataclass
class ResourceRecord:
    """Fields shared by every resource record.

    Attributes:
        ttl: Time to live in seconds (zone default when not given on the line)
        rr_class: DNS class, normally "IN"
    """
    ttl: int = 0
    rr_class: str = "IN"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        result = {"ttl": self.ttl, "class": self.rr_class}
        for f in fields(self):
            if f.name in ("ttl", "rr_class"):
                continue
            value = getattr(self, f.name)
            if isinstance(value, (IPv4Address, IPv6Address)):
                value = str(value)
            result[f.name] = value
        return result


@dataclass
class ARecord(ResourceRecord):
    """IPv4 address record.

    Attributes:
        address: IPv4 address
        inaddr: True when the line carried an ``inaddr`` comment, which
            excludes the record from reverse zone generation
    """
    address: IPv4Address = IPv4Address(0)
    inaddr: bool = False


@dataclass
class AAAARecord(ResourceRecord):
    """IPv6 address record."""
    address: IPv6Address = IPv6Address(0)


@dataclass
class CNAMERecord(ResourceRecord):
    target: str = ""


@dataclass
class MXRecord(ResourceRecord):
    priority: int = 0
    mail: str = ""


@dataclass
class TXTRecord(ResourceRecord):
    text: str = ""


@dataclass
class NSRecord(ResourceRecord):
    name_server: str = ""


@dataclass
class SOARecord(ResourceRecord):
    """Start of authority record."""
    primary_ns: str = ""
    email: str = ""
    serial: int = 0
    refresh: int = 0
    retry: int = 0
    expire: int = 0
    minimum_ttl: int = 0


@dataclass
class PTRRecord(ResourceRecord):
    pointer: str = ""


@dataclass
class SRVRecord(ResourceRecord):
    priority: int = 0
    weight: int = 0
    port: int = 0
    target: str = ""


@dataclass
class CAARecord(ResourceRecord):
    flags: int = 0
    tag: str = ""
    value: str = ""


@dataclass
class HINFORecord(ResourceRecord):
    cpu: str = ""
    os: str = ""


@dataclass
class NAPTRRecord(ResourceRecord):
    """Naming authority pointer record."""
    order: int = 0
    preference: int = 0
    flags: str = ""
    service: str = ""
    regexp: str = ""
    replacement: str = ""


@dataclass
class SPFRecord(ResourceRecord):
    text: str = ""


# Record type name -> (DNSRecords attribute, record class)
RECORD_TYPES = {
    "A": ("a", ARecord),
    "AAAA": ("aaaa", AAAARecord),
    "CNAME": ("cname", CNAMERecord),
    "MX": ("mx", MXRecord),
    "TXT": ("txt", TXTRecord),
    "NS": ("ns", NSRecord),
    "SOA": ("soa", SOARecord),
    "PTR": ("ptr", PTRRecord),
    "SRV": ("srv", SRVRecord),
    "CAA": ("caa", CAARecord),
    "HINFO": ("hinfo", HINFORecord),
    "NAPTR": ("naptr", NAPTRRecord),
    "SPF": ("spf", SPFRecord),
}


@dataclass
class DNSRecords:
    """All records of every supported type held by one hostname.

    Each list keeps records in the order they were read from the zone.
    """
    a: List[ARecord] = field(default_factory=list)
    aaaa: List[AAAARecord] = field(default_factory=list)
    cname: List[CNAMERecord] = field(default_factory=list)
    mx: List[MXRecord] = field(default_factory=list)
    txt: List[TXTRecord] = field(default_factory=list)
    ns: List[NSRecord] = field(default_factory=list)
    soa: List[SOARecord] = field(default_factory=list)
    ptr: List[PTRRecord] = field(default_factory=list)
    srv: List[SRVRecord] = field(default_factory=list)
    caa: List[CAARecord] = field(default_factory=list)
    hinfo: List[HINFORecord] = field(default_factory=list)
    naptr: List[NAPTRRecord] = field(default_factory=list)
    spf: List[SPFRecord] = field(default_factory=list)

    def add(self, rr_type: str, record: ResourceRecord) -> None:
        """Append a record to the list for its type.

        Args:
            rr_type: Upper case record type name (e.g. "MX")
            record: Record instance of the matching class
        """
        attr, _ = RECORD_TYPES[rr_type]
        getattr(self, attr).append(record)

    def count(self) -> int:
        """Total number of records across all types."""
        return sum(len(getattr(self, attr)) for attr, _ in RECORD_TYPES.values())

    def is_empty(self) -> bool:
        return self.count() == 0

    def to_dict(self) -> dict:
        """Convert to dictionary keyed by record type, omitting empty types."""
        result = {}
        for rr_type, (attr, _) in RECORD_TYPES.items():
            records = getattr(self, attr)
            if records:
                result[rr_type] = [record.to_dict() for record in records]
        return result


@dataclass
class HostRecord:
    """All DNS records for a single fully qualified hostname.

    Attributes:
        hostname: Fully qualified, dot terminated owner name
        records: Records owned by the hostname
    """
    hostname: str
    records: DNSRecords = field(default_factory=DNSRecords)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "hostname": self.hostname,
            "records": self.records.to_dict(),
        }
