# Data Models Package
from .zone_record import (
    RECORD_TYPES,
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
    DNSRecords,
    HostRecord,
)
from .zone_entry import (
    EntryType,
    GenerateDirective,
    ZoneEntry,
    RecordEntry,
    GenerateEntry,
    TTLEntry,
    OriginEntry,
    IncludeEntry,
    ZoneMetadata,
    ZoneEntries,
    ParsedZone,
)
from .kea_reservation import KeaReservation

__all__ = [
    'RECORD_TYPES',
    'ResourceRecord',
    'ARecord',
    'AAAARecord',
    'CNAMERecord',
    'MXRecord',
    'TXTRecord',
    'NSRecord',
    'SOARecord',
    'PTRRecord',
    'SRVRecord',
    'CAARecord',
    'HINFORecord',
    'NAPTRRecord',
    'SPFRecord',
    'DNSRecords',
    'HostRecord',
    'EntryType',
    'GenerateDirective',
    'ZoneEntry',
    'RecordEntry',
    'GenerateEntry',
    'TTLEntry',
    'OriginEntry',
    'IncludeEntry',
    'ZoneMetadata',
    'ZoneEntries',
    'ParsedZone',
    'KeaReservation',
]
