import asyncio

from chestscan.app.scanline import ScanLine
from chestscan.app.schemas import SessionState, SessionStatus
from chestscan.app.store import SessionStore
from chestscan.app.report_generator import MockReportGenerator, build_mock_report

from conftest import FailingGenerator, GatedGenerator, make_upload


def state(status, token=1):
    kwargs = {}
    if status == SessionStatus.FAILED:
        kwargs["error"] = "x"
    elif status == SessionStatus.COMPLETE:
        kwargs["report"] = build_mock_report()
    return SessionState(session_id="s", token=token, status=status, **kwargs)


async def test_sweep_advances_and_wraps():
    scan = ScanLine(interval=0.001)
    scan.start(token=1)
    await asyncio.sleep(0.02)
    assert scan.running
    assert scan.position > 0

    scan.position = 100
    await asyncio.sleep(0.02)
    assert scan.position < 100
    scan.stop()


async def test_follow_runs_only_while_processing():
    scan = ScanLine(interval=0.001)

    scan.follow(state(SessionStatus.PROCESSING))
    assert scan.running

    scan.follow(state(SessionStatus.COMPLETE))
    assert not scan.running
    assert scan.position == 0

    scan.follow(state(SessionStatus.IDLE))
    assert not scan.running


async def test_follow_restarts_for_superseding_request():
    scan = ScanLine(interval=0.001)
    scan.follow(state(SessionStatus.PROCESSING, token=1))
    first = scan._task

    scan.follow(state(SessionStatus.PROCESSING, token=2))
    await asyncio.sleep(0)

    assert first.cancelled()
    assert scan.running
    assert scan.token == 2
    scan.stop()


async def test_scan_line_torn_down_on_every_exit_from_processing():
    for generator in (MockReportGenerator(delay_seconds=0.01), FailingGenerator()):
        store = SessionStore(generator_factory=lambda: generator, scan_interval=0.001)
        entry = store.create()

        entry.controller.submit(make_upload())
        assert entry.scan_line.running

        await entry.controller.wait()
        assert not entry.scan_line.running
        assert entry.response().scan_position == 0


async def test_scan_line_stops_on_reset_and_discard():
    store = SessionStore(generator_factory=GatedGenerator, scan_interval=0.001)
    entry = store.create()

    entry.controller.submit(make_upload())
    assert entry.scan_line.running
    entry.controller.reset()
    assert not entry.scan_line.running

    entry.controller.submit(make_upload())
    assert entry.scan_line.running
    store.discard(entry.controller.session_id)
    assert not entry.scan_line.running
    assert entry.controller.session_id not in store
