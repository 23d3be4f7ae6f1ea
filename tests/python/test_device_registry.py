import asyncio

from lanscanner.lanscanner_types.scanner import DeviceType
from lanscanner.scanner.device_registry import DeviceRegistry, SeenServices

MUSC = "_musc._tcp.local."
SPOTIFY = "_spotify-connect._tcp.local."


def test_merge_two_service_types_yields_one_device():
    async def scenario():
        registry = DeviceRegistry()
        await registry.merge("10.0.0.5", "Node", MUSC, 11000, DeviceType.BLUESOUND, 120)
        await registry.merge("10.0.0.5", "Node", SPOTIFY, 1234, DeviceType.SPOTIFY_CONNECT, 340)
        return await registry.snapshot()

    devices = asyncio.run(scenario())

    assert len(devices) == 1
    device = devices[0]
    assert device.ip == "10.0.0.5"
    assert device.discovery_time_ms == 120
    assert [(s.service_type, s.port, s.device_type, s.last_seen_ms) for s in device.services] == [
        (MUSC, 11000, DeviceType.BLUESOUND, 120),
        (SPOTIFY, 1234, DeviceType.SPOTIFY_CONNECT, 340),
    ]


def test_repeat_service_type_updates_in_place():
    async def scenario():
        registry = DeviceRegistry()
        await registry.merge("10.0.0.5", "Node", MUSC, 11000, DeviceType.BLUESOUND, 120)
        return await registry.merge("10.0.0.5", "Node", MUSC, 11001, DeviceType.BLUESOUND, 500)

    device = asyncio.run(scenario())

    assert len(device.services) == 1
    assert device.services[0].port == 11001
    assert device.services[0].last_seen_ms == 500
    assert device.discovery_time_ms == 120


def test_discovery_time_is_running_minimum():
    async def scenario():
        registry = DeviceRegistry()
        seen = []
        for elapsed in (400, 250, 900, 100, 300):
            device = await registry.merge("10.0.0.7", "Node", MUSC, 11000, DeviceType.BLUESOUND, elapsed)
            seen.append(device.discovery_time_ms)
        return seen

    assert asyncio.run(scenario()) == [400, 250, 250, 100, 100]


def test_latest_resolver_name_wins():
    async def scenario():
        registry = DeviceRegistry()
        await registry.merge("10.0.0.5", "Living Room", MUSC, 11000, DeviceType.BLUESOUND, 10)
        return await registry.merge("10.0.0.5", "librespot", SPOTIFY, 1234, DeviceType.SPOTIFY_CONNECT, 20)

    assert asyncio.run(scenario()).name == "librespot"


def test_merge_returns_independent_copy():
    async def scenario():
        registry = DeviceRegistry()
        device = await registry.merge("10.0.0.5", "Node", MUSC, 11000, DeviceType.BLUESOUND, 10)
        device.name = "changed"
        device.services.clear()
        return await registry.snapshot()

    device = asyncio.run(scenario())[0]
    assert device.name == "Node"
    assert len(device.services) == 1


def test_clear_forgets_devices():
    async def scenario():
        registry = DeviceRegistry()
        await registry.merge("10.0.0.5", "Node", MUSC, 11000, DeviceType.BLUESOUND, 10)
        await registry.clear()
        return registry

    registry = asyncio.run(scenario())
    assert len(registry) == 0


def test_seen_services_admits_each_pair_once():
    async def scenario():
        seen = SeenServices()
        results = [
            await seen.admit("10.0.0.5", MUSC),
            await seen.admit("10.0.0.5", MUSC),
            await seen.admit("10.0.0.5", SPOTIFY),
            await seen.admit("10.0.0.6", MUSC),
        ]
        return results, seen

    results, seen = asyncio.run(scenario())
    assert results == [True, False, True, True]
    assert len(seen) == 3
    assert ("10.0.0.5", MUSC) in seen


def test_device_payload_is_camel_case():
    async def scenario():
        registry = DeviceRegistry()
        return await registry.merge("10.0.0.5", "Node", SPOTIFY, 1234, DeviceType.SPOTIFY_CONNECT, 42)

    payload = asyncio.run(scenario()).to_payload()
    assert payload == {
        "name": "Node",
        "ip": "10.0.0.5",
        "discoveryTimeMs": 42,
        "services": [
            {"serviceType": SPOTIFY, "port": 1234, "deviceType": "spotifyConnect", "lastSeenMs": 42},
        ],
    }
