"""Zone validation.

A zone is first parsed with :class:`ZoneParser`; if that succeeds and the
``named-checkzone`` binary is installed it is run on the file as well.
"""
import logging
import shutil
from dataclasses import dataclass
from subprocess import CalledProcessError, STDOUT, check_output
from typing import Callable, Optional

from zonetools.services.zone_parser import ParseError, ZoneParser


logger = logging.getLogger(__name__)


DEFAULT_CHECKZONE_BINARY = "named-checkzone"


class CheckZoneError(Exception):
    """Raised when the external zone checker cannot be executed."""
    pass


@dataclass
class CheckResult:
    """Outcome of a zone check."""
    zone_name: str
    file_path: str
    ok: bool
    output: str = ""
    returncode: int = 0
    checked_external: bool = False

    def to_dict(self) -> dict:
        return {
            "zone_name": self.zone_name,
            "file_path": self.file_path,
            "ok": self.ok,
            "output": self.output,
            "returncode": self.returncode,
            "checked_external": self.checked_external,
        }


class ZoneChecker:
    """Checks zone files with the built-in parser and named-checkzone."""

    def __init__(
        self,
        binary: str = DEFAULT_CHECKZONE_BINARY,
        parser_factory: Callable[[str], ZoneParser] = ZoneParser,
    ):
        self.binary = binary
        self.parser_factory = parser_factory

    def find_binary(self) -> Optional[str]:
        return shutil.which(self.binary)

    def check(self, zone_name: str, file_path: str) -> CheckResult:
        """Check a zone file.

        Args:
            zone_name: Zone name passed to named-checkzone
            file_path: Zone file

        Returns:
            CheckResult; ``ok`` is False if either check fails

        Raises:
            CheckZoneError: If the checker binary exists but cannot be run
        """
        try:
            parsed = self.parser_factory(file_path).parse()
        except ParseError as e:
            logger.warning(f"Zone {zone_name} failed to parse: {e}")
            return CheckResult(zone_name, file_path, ok=False, output=str(e), returncode=1)

        parse_summary = (
            f"{file_path}: parsed {len(parsed.entries)} entries, "
            f"{len(parsed.entries.hosts())} hosts, origin {parsed.metadata.origin}"
        )

        binary_path = self.find_binary()
        if binary_path is None:
            logger.info(f"{self.binary} not found, skipping external check")
            return CheckResult(zone_name, file_path, ok=True, output=parse_summary)

        cmdline = [binary_path, zone_name, file_path]
        logger.debug(f"Running {' '.join(cmdline)}")
        try:
            output = check_output(cmdline, stderr=STDOUT, universal_newlines=True)
        except CalledProcessError as exc:
            return CheckResult(
                zone_name,
                file_path,
                ok=False,
                output=exc.output or "",
                returncode=exc.returncode,
                checked_external=True,
            )
        except OSError as e:
            raise CheckZoneError(f"failed to run {binary_path}: {e}") from e

        return CheckResult(
            zone_name,
            file_path,
            ok=True,
            output=f"{parse_summary}\n{output}".rstrip("\n"),
            checked_external=True,
        )


def check_zone(zone_name: str, file_path: str,
               binary: str = DEFAULT_CHECKZONE_BINARY) -> CheckResult:
    """Check a zone file with the default checker."""
    return ZoneChecker(binary=binary).check(zone_name, file_path)
