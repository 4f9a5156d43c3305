# Services Package
from zonetools.services.zone_lexer import RecordError
from zonetools.services.zone_parser import ParseError, ZoneParser, parse_zone_file
from zonetools.services.generate import GenerateError, expand_generate, parse_range, replace_placeholders
from zonetools.services.zone_formatter import format_host_records, format_zone
from zonetools.services.reverse_zone import ReverseZoneBuilder, ReverseZoneError, build_reverse_zone
from zonetools.services.kea_exporter import KeaExporter, KeaFormatError
from zonetools.services.dhcp_generator import DHCPRangeGenerator, generate_dhcp_range
from zonetools.services.checkzone import CheckResult, CheckZoneError, ZoneChecker, check_zone

__all__ = [
    'RecordError',
    'ParseError',
    'ZoneParser',
    'parse_zone_file',
    'GenerateError',
    'expand_generate',
    'parse_range',
    'replace_placeholders',
    'format_host_records',
    'format_zone',
    'ReverseZoneBuilder',
    'ReverseZoneError',
    'build_reverse_zone',
    'KeaExporter',
    'KeaFormatError',
    'DHCPRangeGenerator',
    'generate_dhcp_range',
    'CheckResult',
    'CheckZoneError',
    'ZoneChecker',
    'check_zone',
]
