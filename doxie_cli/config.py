from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import Optional

request_timeout_seconds = 5
response_chunk_size = 8192
ap_mode_ip_address = IPv4Address('192.168.1.100')
default_port = 8080
ssdp_multicast_address = '239.255.255.250'
ssdp_port = 1900
ssdp_search_target = 'urn:schemas-getdoxie-com:device:Scanner:1'
ssdp_search_timeout_seconds = 5
auth_username = 'doxie'
internal_image_path = '/DOXIE/JPEG/'


@dataclass(frozen=True)
class DiscoveryConfiguration:
    ap_mode_ip_address: IPv4Address = ap_mode_ip_address
    # Overrides the host found by either probe
    static_ip_address: Optional[IPv4Address] = None
    port: int = default_port
    timeout_seconds: float = request_timeout_seconds
