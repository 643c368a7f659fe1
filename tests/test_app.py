"""Tests for the sysbar application."""

import pytest

from conftest import MEMINFO_NO_SWAP, FakeReader, advancing_stats
from sysbar.app import StatusBar, SysbarApp
from sysbar.config import DisplaySettings
from sysbar.formatting import Readout


def make_app(**kwargs) -> SysbarApp:
    kwargs.setdefault("reader", FakeReader(stat=advancing_stats()))
    kwargs.setdefault("interval", 0.1)
    return SysbarApp(**kwargs)


@pytest.mark.asyncio
async def test_app_creation():
    """Test SysbarApp can be instantiated."""
    app = make_app()
    assert app.title == "sysbar"
    assert app.sub_title == "CPU, memory and swap usage"
    assert app.settings.decimal_places == 2


@pytest.mark.asyncio
async def test_app_compose():
    """Test SysbarApp composes the status bar."""
    app = make_app()
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#status-bar") is not None
        assert pilot.app.query_one("#cpu-label") is not None
        assert pilot.app.query_one("#mem-label") is not None
        assert pilot.app.query_one("#swap-label") is not None


@pytest.mark.asyncio
async def test_app_starts_scheduler():
    """Test the scheduler runs while the app is mounted."""
    app = make_app()
    async with app.run_test() as pilot:
        assert app._scheduler.is_running
        await pilot.pause(0.5)

        status_bar = pilot.app.query_one(StatusBar)
        assert status_bar.text("cpu") == "CPU: 61.54%"
        assert status_bar.text("mem") == "Mem: 50.00%"
        assert status_bar.text("swap") == "Swap: 25.00%"


@pytest.mark.asyncio
async def test_app_quit_binding():
    """Test that 'q' stops the scheduler and exits."""
    app = make_app()
    async with app.run_test() as pilot:
        await pilot.press("q")
        assert pilot.app._exit
        assert not app._scheduler.is_running


@pytest.mark.asyncio
async def test_decimal_bindings():
    """Test the 0/1/2 keys set the precision and reformat at once."""
    settings = DisplaySettings()
    app = make_app(settings=settings, interval=60.0)
    async with app.run_test() as pilot:
        await pilot.press("0")
        assert settings.decimal_places == 0
        await pilot.pause(0.5)

        status_bar = pilot.app.query_one(StatusBar)
        assert status_bar.text("mem") == "Mem: 50%"

        await pilot.press("1")
        await pilot.pause(0.5)
        assert settings.decimal_places == 1
        assert status_bar.text("mem") == "Mem: 50.0%"


@pytest.mark.asyncio
async def test_cycle_binding():
    """Test 'd' cycles the precision."""
    settings = DisplaySettings(decimal_places=2)
    app = make_app(settings=settings)
    async with app.run_test() as pilot:
        await pilot.press("d")
        assert settings.decimal_places == 0


@pytest.mark.asyncio
async def test_swap_hidden_without_swap():
    """Test the swap label is hidden when no swap is configured."""
    app = make_app(reader=FakeReader(stat=advancing_stats(), meminfo=MEMINFO_NO_SWAP))
    async with app.run_test() as pilot:
        await pilot.pause(0.5)
        assert pilot.app.query_one("#swap-label").display is False
        assert pilot.app.query_one("#mem-label").display is True


@pytest.mark.asyncio
async def test_status_bar_sink_methods():
    """Test StatusBar can be driven directly as a metrics sink."""
    app = make_app(interval=60.0)
    async with app.run_test() as pilot:
        status_bar = pilot.app.query_one(StatusBar)

        status_bar.set_cpu("CPU: 12%", True)
        status_bar.apply(Readout("swap", "Swap: --%", False))

        assert status_bar.text("cpu") == "CPU: 12%"
        assert status_bar.text("swap") == "Swap: --%"
        assert pilot.app.query_one("#swap-label").display is False
