"""Session controller for LAN scans"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, List, Optional, Protocol, Set

import lanscanner.constants.constants as constants
from lanscanner.lanscanner_logger.lanscanner_logger import get_logger
from lanscanner.lanscanner_types.exceptions import (BrowseError,
                                                    DaemonInitError,
                                                    DaemonShutdownError,
                                                    NotificationDeliveryError)
from lanscanner.lanscanner_types.scanner import Device
from lanscanner.scanner.category_consumer import CategoryConsumer
from lanscanner.scanner.countdown import ScanCountdown
from lanscanner.scanner.device_registry import DeviceRegistry, SeenServices
from lanscanner.utils.mdns_discovery_backend import (DiscoveryBackend,
                                                     ZeroconfDiscoveryBackend)

logger = get_logger(__name__)


class ScanEventEmitter(Protocol):
    """Receives scan notifications, `new-device`, `scan-tick` and `scan-stopped`"""

    def emit(self, event: str, payload: Any) -> None:
        ...


class ScanController:
    """Starts, stops and reports on mDNS scans.

    A scan browses every service type in constants.SERVICES_TO_BROWSE, merges
    what it finds into a DeviceRegistry and stops itself after
    constants.SCAN_DURATION_SECS ticks. Each piece of shared state has its own
    lock which is never held across a backend call or a notification.
    """

    def __init__(self,
                 emitter: Optional[ScanEventEmitter] = None,
                 backend_factory: Callable[[], DiscoveryBackend] = ZeroconfDiscoveryBackend,
                 scan_duration: int = constants.SCAN_DURATION_SECS,
                 tick_interval: float = constants.SCAN_TICK_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        self.emitter = emitter
        self.backend_factory = backend_factory
        self.scan_duration = scan_duration
        self.tick_interval = tick_interval
        self.clock = clock

        self.registry = DeviceRegistry()
        """Devices found by the current scan"""
        self.seen_services = SeenServices()
        """(ip, service type) pairs admitted by the current scan, a new set per scan"""

        self._scanning = False
        self._session = 0
        """Bumped by every start and stop, consumers drop events once it moves on"""
        self._scanning_lock = asyncio.Lock()
        self._backend: Optional[DiscoveryBackend] = None
        self._backend_lock = asyncio.Lock()
        self._countdown: Optional[ScanCountdown] = None
        self._countdown_lock = asyncio.Lock()
        self._consumer_tasks: Set[asyncio.Task] = set()

    async def start(self) -> None:
        """Starts a scan, does nothing if one is already running.

        Raises:
            DaemonInitError: The discovery daemon couldn't be started, the
                controller is idle again.
        """
        logger.info("`start_scan` called")
        async with self._scanning_lock:
            if self._scanning:
                logger.info("Scan is already in progress.")
                return
            self._scanning = True
            self._session += 1
            session = self._session
            self.seen_services = SeenServices()
            seen_services = self.seen_services

        await self._cancel_countdown()

        logger.info("Starting LAN scan")
        await self.registry.clear()

        backend = self.backend_factory()
        try:
            await backend.start()
        except DaemonInitError as exc:
            logger.error("%s", exc)
            async with self._scanning_lock:
                if self._session == session:
                    self._scanning = False
            raise

        async with self._backend_lock:
            installed = self._session == session
            if installed:
                self._backend = backend
        if not installed:
            logger.info("Scan was stopped while starting, releasing its daemon")
            try:
                await backend.shutdown()
            except DaemonShutdownError as exc:
                logger.error("%s", exc)
            return

        scan_started_at = self.clock()
        for service_type in constants.SERVICES_TO_BROWSE:
            logger.debug("Browsing for service type: %s", service_type)
            try:
                stream = backend.browse(service_type)
            except BrowseError as exc:
                logger.error("%s", exc)
                continue
            consumer = CategoryConsumer(service_type, stream, self.registry,
                                        seen_services, self._notify,
                                        scan_started_at, self.clock,
                                        session_active=lambda: self._session == session)
            task = asyncio.create_task(consumer.run(), name=f"CategoryConsumer {service_type}")
            self._consumer_tasks.add(task)
            task.add_done_callback(self._consumer_done)

        countdown = ScanCountdown(self._on_tick, self._stop_scan,
                                  duration=self.scan_duration,
                                  interval=self.tick_interval)
        async with self._countdown_lock:
            if self._session != session:
                return
            self._countdown = countdown
        countdown.start()

    async def stop(self) -> None:
        """Stops the running scan, does nothing if idle.

        Raises:
            DaemonShutdownError: The discovery daemon failed to shut down. The
                controller is idle regardless.
        """
        await self._stop_scan()

    async def is_scanning(self) -> bool:
        """Returns True while a scan is running"""
        async with self._scanning_lock:
            return self._scanning

    async def get_discovered_devices(self) -> List[Device]:
        """Returns a copy of every device found by the current or last scan"""
        return await self.registry.snapshot()

    async def _stop_scan(self) -> None:
        """Shared by stop() and the countdown expiring"""
        logger.info("Stopping LAN scan")
        async with self._scanning_lock:
            if not self._scanning:
                logger.info("Scan is not running.")
                return
            self._scanning = False
            self._session += 1
            session = self._session

        await self._cancel_countdown()

        async with self._backend_lock:
            backend, self._backend = self._backend, None

        if backend is None:
            return
        try:
            await backend.shutdown()
        except DaemonShutdownError as exc:
            # The scan stays stopped, the caller still hears about it
            logger.error("%s", exc)
            raise
        async with self._scanning_lock:
            superseded = self._session != session
        if superseded:
            logger.debug("A new scan started during shutdown, not sending scan-stopped")
            return
        self._notify(constants.EVENT_SCAN_STOPPED, None)

    async def _cancel_countdown(self) -> None:
        async with self._countdown_lock:
            countdown, self._countdown = self._countdown, None
        if countdown is not None:
            countdown.cancel()

    def _on_tick(self, seconds_left: int) -> None:
        self._notify(constants.EVENT_SCAN_TICK, seconds_left)

    def _notify(self, event: str, payload: Any) -> None:
        """Delivers a notification, failures are logged and never raised"""
        if self.emitter is None:
            return
        try:
            self.emitter.emit(event, payload)
        except Exception as exc:
            error = NotificationDeliveryError(event, str(exc))
            if event == constants.EVENT_SCAN_TICK:
                logger.warning("%s", error)
            else:
                logger.error("%s", error)

    def _consumer_done(self, task: asyncio.Task) -> None:
        self._consumer_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s failed: %s", task.get_name(), exc)
