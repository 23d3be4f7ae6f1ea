import asyncio

from lanscanner.scanner.countdown import ScanCountdown


def test_countdown_ticks_down_then_expires():
    ticks = []
    expired = []

    async def on_expired():
        expired.append(True)

    async def scenario():
        countdown = ScanCountdown(ticks.append, on_expired, duration=5, interval=0)
        await asyncio.wait_for(countdown.start(), timeout=1)
        return countdown

    countdown = asyncio.run(scenario())

    assert ticks == [5, 4, 3, 2, 1]
    assert expired == [True]
    assert countdown.done


def test_cancelled_countdown_stops_ticking_and_never_expires():
    ticks = []
    expired = []

    async def on_expired():
        expired.append(True)

    async def scenario():
        countdown = ScanCountdown(ticks.append, on_expired, duration=30, interval=5)
        task = countdown.start()
        for _ in range(5):
            await asyncio.sleep(0)
        countdown.cancel()
        await asyncio.gather(task, return_exceptions=True)
        return countdown

    countdown = asyncio.run(scenario())

    assert ticks == [30]
    assert expired == []
    assert countdown.cancelled
    assert countdown.done


def test_cancel_flag_is_checked_before_each_tick():
    ticks = []
    expired = []
    holder = {}

    def on_tick(seconds_left):
        ticks.append(seconds_left)
        if seconds_left == 28:
            holder["countdown"].cancel()

    async def on_expired():
        expired.append(True)

    async def scenario():
        countdown = ScanCountdown(on_tick, on_expired, duration=30, interval=0)
        holder["countdown"] = countdown
        await asyncio.wait_for(countdown.start(), timeout=1)

    asyncio.run(scenario())

    assert ticks == [30, 29, 28]
    assert expired == []


def test_cancel_from_expiry_callback_lets_it_finish():
    finished = []

    async def scenario():
        countdown = None

        async def on_expired():
            countdown.cancel()
            await asyncio.sleep(0)
            finished.append(True)

        countdown = ScanCountdown(lambda _: None, on_expired, duration=1, interval=0)
        await asyncio.wait_for(countdown.start(), timeout=1)

    asyncio.run(scenario())
    assert finished == [True]


def test_expiry_failure_is_contained():
    async def on_expired():
        raise RuntimeError("daemon gone")

    async def scenario():
        countdown = ScanCountdown(lambda _: None, on_expired, duration=1, interval=0)
        await asyncio.wait_for(countdown.start(), timeout=1)
        return countdown

    assert asyncio.run(scenario()).done
