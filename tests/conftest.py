"""Fake pyppeteer browser and page used by the pipeline tests."""

import asyncio
from pathlib import Path

import pytest

from c3_chart_maker.generators import chart_renderer
from c3_chart_maker.generators.chart_renderer import MEASURE_SCRIPT, RENDER_SCRIPT

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

DEFAULT_GEOMETRY = {
    "bodyWidth": 680,
    "bodyHeight": 360,
    "x": 8,
    "y": 10,
    "width": 640,
    "height": 320,
}


class FakeConsoleMessage:
    def __init__(self, type, text):
        self.type = type
        self.text = text


class FakePage:
    """Records every driver call in order and plays back scripted results."""

    def __init__(
        self,
        geometry=None,
        console_messages=(),
        goto_error=None,
        render_error=None,
        wait_error=None,
        screenshot_error=None,
        render_blocker=None,
        script_error=None,
    ):
        self.geometry = geometry or dict(DEFAULT_GEOMETRY)
        self.console_messages = list(console_messages)
        self.goto_error = goto_error
        self.render_error = render_error
        self.wait_error = wait_error
        self.screenshot_error = screenshot_error
        self.render_blocker = render_blocker
        self.script_error = script_error
        self.calls = []
        self.listeners = {}
        self.rendered_payloads = []

    def on(self, event, handler):
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event, handler):
        self.listeners[event].remove(handler)

    def emit(self, event, *args):
        for handler in list(self.listeners.get(event, [])):
            handler(*args)

    def call_names(self):
        return [call[0] for call in self.calls]

    async def goto(self, url):
        await asyncio.sleep(0)
        self.calls.append(("goto", url))
        if self.goto_error:
            raise self.goto_error

    async def addScriptTag(self, options):
        await asyncio.sleep(0)
        self.calls.append(("addScriptTag", options))
        if self.script_error:
            raise self.script_error

    async def addStyleTag(self, options):
        await asyncio.sleep(0)
        self.calls.append(("addStyleTag", options))

    async def evaluate(self, script, *args):
        await asyncio.sleep(0)
        if script == RENDER_SCRIPT:
            self.calls.append(("render", args[0]))
            self.rendered_payloads.append(args[0])
            if self.render_blocker is not None:
                await self.render_blocker.wait()
            for kind, text in self.console_messages:
                self.emit("console", FakeConsoleMessage(kind, text))
            if self.render_error:
                raise self.render_error
            return True
        if script == MEASURE_SCRIPT:
            self.calls.append(("measure", args[0]))
            return dict(self.geometry)
        raise AssertionError(f"unexpected script: {script}")

    async def waitForSelector(self, selector, options=None):
        await asyncio.sleep(0)
        self.calls.append(("waitForSelector", selector, options))
        if self.wait_error:
            raise self.wait_error

    async def setViewport(self, viewport):
        await asyncio.sleep(0)
        self.calls.append(("setViewport", viewport))

    async def screenshot(self, options):
        await asyncio.sleep(0)
        self.calls.append(("screenshot", options))
        path = Path(options["path"])
        if self.screenshot_error:
            path.write_bytes(PNG_BYTES[:4])
            raise self.screenshot_error
        path.write_bytes(PNG_BYTES)


class FakeBrowser:
    def __init__(self, page=None, close_error=None):
        self.page = page or FakePage()
        self.close_error = close_error
        self.close_count = 0

    async def newPage(self):
        return self.page

    async def close(self):
        self.close_count += 1
        if self.close_error:
            raise self.close_error


class FakeLauncher:
    """Stands in for pyppeteer.launch and remembers every browser it started."""

    def __init__(self):
        self.browsers = []
        self.launch_options = []
        self.next_browser = None

    async def __call__(self, **options):
        self.launch_options.append(options)
        browser = self.next_browser or FakeBrowser()
        self.next_browser = None
        self.browsers.append(browser)
        return browser

    @property
    def browser(self):
        return self.browsers[-1]


@pytest.fixture
def fake_launch(monkeypatch):
    launcher = FakeLauncher()
    monkeypatch.setattr(chart_renderer, "launch", launcher)
    return launcher


@pytest.fixture
def xy_table():
    return [{"x": 1, "y": 2}, {"x": 2, "y": 3}]


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("date,sales,returns\n2024-01,10,1\n2024-02,12.5,\n2024-03,n/a,3\n")
    return path
