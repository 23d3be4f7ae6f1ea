"""Models for devices found by the LAN scanner"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PortType = Annotated[int, Field(ge=0, le=65535, description="Advertised service port")]
"""Port, 0-65535"""

ElapsedMsType = Annotated[int, Field(ge=0, description="Milliseconds since the scan started")]
"""Milliseconds elapsed since scan start"""


class DeviceType(str, Enum):
    """The type of device, classified by its discovered mDNS service"""
    BLUESOUND = "bluesound"
    VOLUMIO = "volumio"
    SPOTIFY_CONNECT = "spotifyConnect"
    QOBUZ_CONNECT = "qobuzConnect"
    GENERIC = "generic"


class DiscoveredService(BaseModel):
    """A specific mDNS service discovered on a device"""
    model_config = ConfigDict(from_attributes=True,
                              alias_generator=to_camel,
                              populate_by_name=True,
                              json_schema_serialization_defaults_required=True)

    service_type: str
    """The mDNS service type, e.g. `_http._tcp.local.`"""
    port: PortType
    """The advertised port for the service"""
    device_type: DeviceType
    """Classification derived from the service type"""
    last_seen_ms: ElapsedMsType
    """Time from the start of the scan when this service was last observed"""


class Device(BaseModel):
    """A device discovered on the local network, keyed by IP"""
    model_config = ConfigDict(from_attributes=True,
                              alias_generator=to_camel,
                              populate_by_name=True,
                              json_schema_serialization_defaults_required=True)

    name: str
    """The advertised name of the device"""
    ip: str
    """The IPv4 address of the device"""
    discovery_time_ms: ElapsedMsType
    """Time from the start of the scan until the earliest service on this device was seen"""
    services: List[DiscoveredService] = Field(default_factory=list)
    """Services discovered on this device, in discovery order"""

    def add_or_update_service(self, service_type: str, port: int,
                              device_type: DeviceType, elapsed_ms: int) -> None:
        """Adds a new service or overwrites the existing entry for the same service type"""
        for service in self.services:
            if service.service_type == service_type:
                service.port = port
                service.device_type = device_type
                service.last_seen_ms = elapsed_ms
                return
        self.services.append(DiscoveredService(service_type=service_type,
                                               port=port,
                                               device_type=device_type,
                                               last_seen_ms=elapsed_ms))

    def to_payload(self) -> dict:
        """Serializes the device the way clients receive it"""
        return self.model_dump(mode="json", by_alias=True)


@dataclass
class ResolvedServiceEvent:
    """A resolved mDNS advertisement as delivered by a discovery backend"""
    fullname: str
    port: int
    addresses: List[str] = field(default_factory=list)
