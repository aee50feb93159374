"""
Zone-indexed subnet planning for the network stack.

Each availability zone gets one public and one private /24. Public blocks
take the first `zone_count` /24s of the VPC range and private blocks the
next `zone_count`, so for 172.16.0.0/16 and three zones:

    zone  letter  public           private
    0     A       172.16.0.0/24    172.16.3.0/24
    1     B       172.16.1.0/24    172.16.4.0/24
    2     C       172.16.2.0/24    172.16.5.0/24
"""

import ipaddress
from typing import NamedTuple

SUBNET_PREFIX_LENGTH = 24
# One letter suffix per zone
MAX_ZONES = 26


class SubnetLayout(NamedTuple):
    zone_index: int
    letter: str
    availability_zone: str
    public_cidr: str
    private_cidr: str


def zone_letter(zone_index: int) -> str:
    """Upper-case suffix used in construct ids and Name tags (0 -> 'A')."""
    return chr(ord("A") + zone_index)


def _check_zone_count(zone_count: int) -> None:
    if not 1 <= zone_count <= MAX_ZONES:
        raise ValueError(f"zone_count must be between 1 and {MAX_ZONES}, got {zone_count}")


def subnet_layout(zone_index: int, base_cidr: str, region: str, zone_count: int = 3) -> SubnetLayout:
    _check_zone_count(zone_count)
    if not 0 <= zone_index < zone_count:
        raise ValueError(f"zone_index {zone_index} is outside [0, {zone_count})")

    network = ipaddress.ip_network(base_cidr)
    if network.prefixlen > SUBNET_PREFIX_LENGTH:
        raise ValueError(f"{base_cidr} is smaller than a /{SUBNET_PREFIX_LENGTH}")

    block_size = 2 ** (network.max_prefixlen - SUBNET_PREFIX_LENGTH)
    available = network.num_addresses // block_size
    if available < 2 * zone_count:
        raise ValueError(
            f"{base_cidr} holds {available} /{SUBNET_PREFIX_LENGTH} blocks, "
            f"{2 * zone_count} are needed for {zone_count} zones"
        )

    def block(offset: int) -> str:
        start = network.network_address + offset * block_size
        return str(ipaddress.ip_network(f"{start}/{SUBNET_PREFIX_LENGTH}"))

    return SubnetLayout(
        zone_index=zone_index,
        letter=zone_letter(zone_index),
        availability_zone=f"{region}{zone_letter(zone_index).lower()}",
        public_cidr=block(zone_index),
        private_cidr=block(zone_index + zone_count),
    )


def plan_subnets(base_cidr: str, region: str, zone_count: int = 3) -> list[SubnetLayout]:
    """Layouts for every zone, checked for overlapping CIDR blocks."""
    _check_zone_count(zone_count)
    layouts = [subnet_layout(i, base_cidr, region, zone_count) for i in range(zone_count)]

    seen: list[ipaddress.IPv4Network | ipaddress.IPv6Network] = []
    for layout in layouts:
        for cidr in (layout.public_cidr, layout.private_cidr):
            candidate = ipaddress.ip_network(cidr)
            clash = next((other for other in seen if candidate.overlaps(other)), None)
            if clash is not None:
                raise ValueError(f"Subnet {candidate} overlaps {clash}")
            seen.append(candidate)

    return layouts
