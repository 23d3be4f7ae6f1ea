"""Drains the resolved events of one browsed service type into the registry"""
from __future__ import annotations

import ipaddress
import time
from typing import AsyncIterable, Callable, Iterable, Optional

import lanscanner.constants.constants as constants
from lanscanner.lanscanner_logger.lanscanner_logger import get_logger
from lanscanner.lanscanner_types.scanner import (DeviceType,
                                                 ResolvedServiceEvent)
from lanscanner.scanner.device_registry import DeviceRegistry, SeenServices

logger = get_logger(__name__)

_DEVICE_TYPES_BY_SERVICE = {
    constants.BLUESOUND_SERVICE_TYPE: DeviceType.BLUESOUND,
    constants.SPOTIFY_CONNECT_SERVICE_TYPE: DeviceType.SPOTIFY_CONNECT,
    constants.QOBUZ_CONNECT_SERVICE_TYPE: DeviceType.QOBUZ_CONNECT,
}


def resolve_device_type(service_type: str, fullname: str) -> DeviceType:
    """Classifies a service by its type, _http._tcp only counts as Volumio by name"""
    if service_type == constants.VOLUMIO_SERVICE_TYPE:
        if constants.VOLUMIO_NAME_KEYWORD in fullname.lower():
            return DeviceType.VOLUMIO
        return DeviceType.GENERIC
    return _DEVICE_TYPES_BY_SERVICE.get(service_type, DeviceType.GENERIC)


def select_ipv4_address(addresses: Iterable[str]) -> Optional[str]:
    """Returns the first IPv4 address that isn't link-local"""
    for address in addresses:
        try:
            parsed = ipaddress.ip_address(address)
        except ValueError:
            continue
        if isinstance(parsed, ipaddress.IPv4Address) and not parsed.is_link_local:
            return str(parsed)
    return None


def short_name(fullname: str) -> str:
    """Instance label of an mDNS full name, `Kitchen._musc._tcp.local.` -> `Kitchen`"""
    return fullname.split(".", 1)[0]


class CategoryConsumer:
    """Consumes the event stream of a single service type for one scan.

    Events still queued when the scan ends are dropped once *session_active*
    returns False, so a restarted scan never sees them.
    """

    def __init__(self,
                 service_type: str,
                 stream: AsyncIterable[ResolvedServiceEvent],
                 registry: DeviceRegistry,
                 seen_services: SeenServices,
                 notify: Callable[[str, object], None],
                 scan_started_at: float,
                 clock: Callable[[], float] = time.monotonic,
                 session_active: Optional[Callable[[], bool]] = None):
        self.service_type = service_type
        self.stream = stream
        self.registry = registry
        self.seen_services = seen_services
        self.notify = notify
        self.scan_started_at = scan_started_at
        self.clock = clock
        self.session_active = session_active or (lambda: True)

    async def run(self) -> None:
        """Processes events in delivery order until the stream closes"""
        async for event in self.stream:
            await self.handle_resolved_service(event)
        logger.info("Receiver for %s disconnected.", self.service_type)

    async def handle_resolved_service(self, event: ResolvedServiceEvent) -> bool:
        """Admits one resolved service, returns False when it was dropped"""
        if not self.session_active():
            logger.debug("Dropping %s, its scan has ended", event.fullname)
            return False

        logger.debug("Addresses for %s: %s", event.fullname, event.addresses)
        ip = select_ipv4_address(event.addresses)
        if ip is None:
            return False

        if not await self.seen_services.admit(ip, self.service_type):
            return False
        if not self.session_active():
            return False

        device_type = resolve_device_type(self.service_type, event.fullname)
        name = short_name(event.fullname)
        elapsed_ms = max(0, int((self.clock() - self.scan_started_at) * 1000))

        logger.info("%s (%s:%s) %s (%sms)", name, ip, event.port, self.service_type, elapsed_ms)

        device = await self.registry.merge(ip, name, self.service_type, event.port,
                                           device_type, elapsed_ms)
        self.notify(constants.EVENT_NEW_DEVICE, device.to_payload())
        return True
