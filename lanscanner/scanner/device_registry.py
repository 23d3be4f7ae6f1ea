"""Per-session device registry and duplicate advertisement tracking"""
from __future__ import annotations

import asyncio
from typing import Dict, List, Set, Tuple

from lanscanner.lanscanner_logger.lanscanner_logger import get_logger
from lanscanner.lanscanner_types.scanner import Device, DeviceType

logger = get_logger(__name__)


class DeviceRegistry:
    """Devices discovered during the current scan, keyed by IP.

    Every access holds the registry lock for a single read or mutation only,
    callers get deep copies back so they can use them outside the lock.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._devices: Dict[str, Device] = {}

    async def merge(self, ip: str, name: str, service_type: str, port: int,
                    device_type: DeviceType, elapsed_ms: int) -> Device:
        """Merges a resolved service into the device at *ip*.

        Creates the device on first sight. Afterwards the name follows the
        latest resolver, discovery_time_ms keeps the earliest observation and
        the service entry for *service_type* is updated in place.

        Returns:
            A deep copy of the merged device.
        """
        async with self._lock:
            device = self._devices.get(ip)
            if device is None:
                device = Device(name=name, ip=ip, discovery_time_ms=elapsed_ms)
                self._devices[ip] = device
                logger.debug("Registered new device %s at %s", name, ip)
            if elapsed_ms < device.discovery_time_ms:
                device.discovery_time_ms = elapsed_ms
            device.name = name
            device.add_or_update_service(service_type, port, device_type, elapsed_ms)
            return device.model_copy(deep=True)

    async def snapshot(self) -> List[Device]:
        """Returns independent copies of every known device"""
        async with self._lock:
            return [device.model_copy(deep=True) for device in self._devices.values()]

    async def clear(self) -> None:
        """Forgets every device"""
        async with self._lock:
            self._devices.clear()

    def __len__(self) -> int:
        return len(self._devices)


class SeenServices:
    """(ip, service type) pairs already admitted during the current scan"""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._seen: Set[Tuple[str, str]] = set()

    async def admit(self, ip: str, service_type: str) -> bool:
        """Records the pair, returns False if it was already admitted"""
        key = (ip, service_type)
        async with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)
