import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from lanscanner.lanscanner_types.exceptions import (BrowseError,
                                                    DaemonInitError,
                                                    DaemonShutdownError)
from lanscanner.utils.mdns_discovery_backend import (DiscoveryBackend,
                                                     ServiceEventStream)


class FakeBackend(DiscoveryBackend):
    """In-memory discovery backend, tests push events into its streams."""

    def __init__(self, fail_start: bool = False, fail_browse: Sequence[str] = (),
                 fail_shutdown: bool = False):
        self.fail_start = fail_start
        self.fail_browse = set(fail_browse)
        self.fail_shutdown = fail_shutdown
        self.streams: Dict[str, ServiceEventStream] = {}
        self.started = False
        self.shutdown_calls = 0
        self.start_gate: Optional[asyncio.Event] = None
        """When set, start() waits on it before returning"""
        self.shutdown_gate: Optional[asyncio.Event] = None
        """When set, shutdown() waits on it after closing the streams"""

    async def start(self) -> None:
        if self.fail_start:
            raise DaemonInitError("Failed to create mDNS daemon: no interfaces")
        if self.start_gate is not None:
            await self.start_gate.wait()
        self.started = True

    def browse(self, service_type: str) -> ServiceEventStream:
        if service_type in self.fail_browse:
            raise BrowseError(service_type, "bad type")
        stream = ServiceEventStream(service_type)
        self.streams[service_type] = stream
        return stream

    async def shutdown(self) -> None:
        self.shutdown_calls += 1
        for stream in self.streams.values():
            stream.close()
        if self.shutdown_gate is not None:
            await self.shutdown_gate.wait()
        if self.fail_shutdown:
            raise DaemonShutdownError("Failed to shutdown mDNS daemon: socket busy")


class RecordingEmitter:
    """Collects emitted notifications."""

    def __init__(self, fail_on: Optional[set] = None):
        self.events: List[tuple] = []
        self.fail_on = fail_on or set()

    def emit(self, event, payload):
        if event in self.fail_on:
            raise RuntimeError("host went away")
        self.events.append((event, payload))

    def payloads(self, event):
        return [payload for name, payload in self.events if name == event]


class FakeClock:
    """Monotonic clock the tests move by hand, in milliseconds."""

    def __init__(self):
        self.now_ms = 0

    def __call__(self) -> float:
        return self.now_ms / 1000


async def settle(rounds: int = 20) -> None:
    """Let queued tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def fake_clock():
    return FakeClock()
