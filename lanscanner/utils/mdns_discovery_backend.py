"""mDNS discovery backend used by the scanner"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List, Optional, Set

from zeroconf import BadTypeInNameException, ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

import lanscanner.constants.constants as constants
from lanscanner.lanscanner_logger.lanscanner_logger import get_logger
from lanscanner.lanscanner_types.exceptions import (BrowseError,
                                                    DaemonInitError,
                                                    DaemonShutdownError)
from lanscanner.lanscanner_types.scanner import ResolvedServiceEvent

logger = get_logger(__name__)

_STREAM_CLOSED = object()


class ServiceEventStream:
    """FIFO of resolved events for one service type, iterate until closed"""

    def __init__(self, service_type: str):
        self.service_type = service_type
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        """True once close() was called"""
        return self._closed

    def put(self, event: ResolvedServiceEvent) -> None:
        """Queues an event, events after close() are dropped"""
        if self._closed:
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        """Ends iteration once the already queued events are drained"""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_STREAM_CLOSED)

    def __aiter__(self) -> AsyncIterator[ResolvedServiceEvent]:
        return self

    async def __anext__(self) -> ResolvedServiceEvent:
        item = await self._queue.get()
        if item is _STREAM_CLOSED:
            raise StopAsyncIteration
        return item


class DiscoveryBackend(ABC):
    """A discovery daemon that can browse service types"""

    @abstractmethod
    async def start(self) -> None:
        """Starts the daemon, raises DaemonInitError"""

    @abstractmethod
    def browse(self, service_type: str) -> ServiceEventStream:
        """Begins browsing *service_type*, raises BrowseError"""

    @abstractmethod
    async def shutdown(self) -> None:
        """Stops the daemon and closes every stream, raises DaemonShutdownError"""


class ZeroconfDiscoveryBackend(DiscoveryBackend):
    """Browses and resolves services with python-zeroconf's asyncio API"""

    def __init__(self, resolve_timeout_ms: Optional[int] = None):
        self.resolve_timeout_ms = (constants.MDNS_RESOLVE_TIMEOUT_MS if resolve_timeout_ms is None
                                   else resolve_timeout_ms)
        self.aiozc: Optional[AsyncZeroconf] = None
        self._browsers: List[AsyncServiceBrowser] = []
        self._streams: Dict[str, ServiceEventStream] = {}
        self._pending: Set[asyncio.Task] = set()

    async def start(self) -> None:
        try:
            self.aiozc = AsyncZeroconf()
        except Exception as exc:
            raise DaemonInitError(f"Failed to create mDNS daemon: {exc}") from exc
        logger.info("mDNS daemon started")

    def browse(self, service_type: str) -> ServiceEventStream:
        if self.aiozc is None:
            raise BrowseError(service_type, "mDNS daemon is not running")
        stream = ServiceEventStream(service_type)
        try:
            browser = AsyncServiceBrowser(self.aiozc.zeroconf, service_type,
                                          handlers=[self._on_service_state_change])
        except (BadTypeInNameException, RuntimeError, OSError) as exc:
            raise BrowseError(service_type, str(exc)) from exc
        self._browsers.append(browser)
        self._streams[service_type] = stream
        return stream

    async def shutdown(self) -> None:
        aiozc, self.aiozc = self.aiozc, None
        browsers, self._browsers = self._browsers, []
        for task in list(self._pending):
            task.cancel()
        try:
            for browser in browsers:
                await browser.async_cancel()
            if aiozc is not None:
                await aiozc.async_close()
        except Exception as exc:
            raise DaemonShutdownError(f"Failed to shutdown mDNS daemon: {exc}") from exc
        finally:
            for stream in self._streams.values():
                stream.close()
            self._streams = {}
        logger.info("mDNS daemon shut down.")

    def _on_service_state_change(self, zeroconf: Zeroconf, service_type: str,
                                 name: str, state_change: ServiceStateChange) -> None:
        """Browser callback, resolution happens in a task so the browser isn't blocked"""
        if state_change not in (ServiceStateChange.Added, ServiceStateChange.Updated):
            return
        task = asyncio.ensure_future(self._resolve(zeroconf, service_type, name))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _resolve(self, zeroconf: Zeroconf, service_type: str, name: str) -> None:
        info = AsyncServiceInfo(service_type, name)
        try:
            resolved = await info.async_request(zeroconf, self.resolve_timeout_ms)
        except Exception as exc:
            logger.warning("Failed to resolve %s: %s", name, exc)
            return
        if not resolved:
            logger.debug("%s did not resolve within %sms", name, self.resolve_timeout_ms)
            return
        stream = self._streams.get(service_type)
        if stream is None:
            return
        stream.put(ResolvedServiceEvent(fullname=info.name,
                                        port=info.port or 0,
                                        addresses=list(info.parsed_addresses())))
