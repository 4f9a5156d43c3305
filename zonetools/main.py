"""Main entry point for the zonetools command line."""
import argparse
import json
import logging
import sys
from typing import Callable, List, Optional

import dns.exception

from zonetools.config import Config, ConfigurationError

logger = logging.getLogger(__name__)


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(config: Config) -> None:
    """Configure root logging; diagnostics go to stderr so stdout stays clean."""
    logging.basicConfig(
        level=config.effective_log_level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def make_parser_factory(config: Config) -> Callable:
    """Create a ZoneParser factory bound to the configured parser options."""
    from zonetools.services.zone_parser import ZoneParser

    options = config.parser_options()

    def parser_factory(file_path: str) -> ZoneParser:
        return ZoneParser(file_path, **options)

    return parser_factory


def write_output(text: str, output_file: Optional[str]) -> None:
    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"Wrote {output_file}")
    else:
        sys.stdout.write(text)


def cmd_parse(args, config: Config) -> int:
    from zonetools.services.zone_formatter import format_zone

    parsed = make_parser_factory(config)(args.zone_file).parse()
    if args.json:
        text = json.dumps(parsed.to_dict(), indent=2) + "\n"
    else:
        text = format_zone(parsed.entries, parsed.metadata)
    write_output(text, args.output)
    return 0


def cmd_mkarpa(args, config: Config) -> int:
    from zonetools.services.reverse_zone import ReverseZoneBuilder

    builder = ReverseZoneBuilder(args.reverse_domain, parser_factory=make_parser_factory(config))
    for zone_file in args.zone_files:
        builder.add_zone(zone_file)
    logger.info(f"Built {builder.reverse_origin} with {builder.ptr_count} PTR records")
    write_output(builder.render(), args.output)
    return 0


def cmd_mkkea(args, config: Config) -> int:
    from zonetools.services.kea_exporter import KeaExporter

    exporter = KeaExporter(network=args.network, parser_factory=make_parser_factory(config))
    for zone_file in args.zone_files:
        exporter.add_zone(zone_file)

    if not exporter.reservations:
        logger.warning("No Kea records found in input files")
        if args.stop:
            return 1

    write_output(exporter.render(sort_by=args.sort_by), args.output)
    return 0


def cmd_dhcpgen(args, config: Config) -> int:
    from zonetools.services.dhcp_generator import generate_dhcp_range

    text = generate_dhcp_range(
        args.start_ip,
        args.end_ip,
        hostname=args.hostname,
        host_start=args.hoststart,
        origin=args.origin,
        mx=args.mx,
        mx_priority=args.mx_priority,
        comments=args.comments,
    )
    write_output(text, args.output)
    return 0


def cmd_checkzone(args, config: Config) -> int:
    from zonetools.services.checkzone import ZoneChecker

    checker = ZoneChecker(
        binary=config.checkzone_binary,
        parser_factory=make_parser_factory(config),
    )
    result = checker.check(args.zone_name, args.zone_file)
    if result.output:
        print(result.output)
    if not result.ok:
        logger.error(f"Zone {args.zone_name} failed validation")
        return 1
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zonetools",
        description="DNS zone file parser and generators",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    p = subparsers.add_parser("parse", help="Parse a zone file and print it")
    p.add_argument("zone_file")
    p.add_argument("--json", action="store_true", help="Print the parsed entries as JSON")
    p.add_argument("-o", dest="output", help="Output file")
    p.set_defaults(func=cmd_parse)

    p = subparsers.add_parser("mkarpa", help="Generate a reverse zone from forward zones")
    p.add_argument("reverse_domain", help="Reverse domain, e.g. 1.168.192.in-addr.arpa")
    p.add_argument("zone_files", nargs="+")
    p.add_argument("-o", dest="output", help="Output file")
    p.set_defaults(func=cmd_mkarpa)

    p = subparsers.add_parser("mkkea", help="Export Kea DHCP reservations")
    p.add_argument("zone_files", nargs="+")
    p.add_argument("-o", dest="output", help="Output file")
    p.add_argument("-s", dest="stop", action="store_true",
                   help="Exit with an error if no Kea records are found")
    p.add_argument("-n", dest="network", help="Only export addresses in this CIDR network")
    sort = p.add_mutually_exclusive_group()
    sort.add_argument("-H", dest="sort_by", action="store_const", const="hostname",
                      help="Sort output by hostname")
    sort.add_argument("-I", dest="sort_by", action="store_const", const="ip",
                      help="Sort output by IP address")
    sort.add_argument("-M", dest="sort_by", action="store_const", const="mac",
                      help="Sort output by MAC address")
    p.set_defaults(func=cmd_mkkea)

    p = subparsers.add_parser("dhcpgen", help="Generate $GENERATE directives for a DHCP range")
    p.add_argument("start_ip")
    p.add_argument("end_ip")
    p.add_argument("--hoststart", type=int, default=0, help="First host number")
    p.add_argument("--hostname", default="dhcp", help="Host name prefix")
    p.add_argument("--origin", default="", help="DNS domain")
    p.add_argument("--mx", default="", help="Add an MX record for each host")
    p.add_argument("--mx-priority", dest="mx_priority", type=int, default=0, help="MX priority")
    p.add_argument("--comments", action="store_true", help="Add explanatory comments")
    p.add_argument("-o", dest="output", help="Output file")
    p.set_defaults(func=cmd_dhcpgen)

    p = subparsers.add_parser("checkzone", help="Validate a zone file")
    p.add_argument("zone_name")
    p.add_argument("zone_file")
    p.set_defaults(func=cmd_checkzone)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    from zonetools.services.checkzone import CheckZoneError
    from zonetools.services.reverse_zone import ReverseZoneError
    from zonetools.services.zone_parser import ParseError

    args = build_arg_parser().parse_args(argv)

    try:
        config = Config.from_env()
    except ConfigurationError as e:
        logging.basicConfig(format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stderr)])
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logging(config)
    logger.debug(f"Running {args.command}")

    try:
        return args.func(args, config)
    except ParseError as e:
        logger.error(f"Parse error: {e}")
    except (ReverseZoneError, CheckZoneError) as e:
        logger.error(f"{args.command} failed: {e}")
    except (ValueError, dns.exception.DNSException) as e:
        # KeaFormatError and GenerateError are ValueErrors
        logger.error(f"{args.command} failed: {e}")
    except OSError as e:
        logger.error(f"I/O error: {e}")
    return 1


if __name__ == '__main__':
    sys.exit(main())
