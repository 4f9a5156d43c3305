"""Kea DHCP reservation data model."""
from dataclasses import dataclass, field
from typing import Dict, List, Union


@dataclass
class KeaReservation:
    """A host reservation extracted from a zone file.

    Attributes:
        hostname: Fully qualified hostname owning the reservation
        ip_address: IPv4 address taken from the host's A record
        kea_data: Kea directives from the host's ``kea:`` TXT record,
            e.g. ``hw-address`` or ``client-classes``
    """
    hostname: str
    ip_address: str
    kea_data: Dict[str, Union[str, List[str]]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to a Kea ``reservations`` list item.

        Kea directives are emitted in sorted key order after the hostname
        and address.
        """
        result = {
            "hostname": self.hostname,
            "ip-address": self.ip_address,
        }
        for key in sorted(self.kea_data):
            result[key] = self.kea_data[key]
        return result

    @property
    def hw_address(self) -> str:
        return self.kea_data.get("hw-address", "")
