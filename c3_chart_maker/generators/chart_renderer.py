# c3_chart_maker/generators/chart_renderer.py
import asyncio
import enum
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pyppeteer import launch
from pyppeteer.errors import PyppeteerError
from pyppeteer.errors import TimeoutError as PyppeteerTimeoutError

from c3_chart_maker import config
from c3_chart_maker.errors import (
    CaptureWriteError,
    InvalidChartDefinitionError,
    NavigationError,
    RenderError,
    RenderRuntimeError,
    RenderTimeoutError,
    StyleInjectionError,
    ViewportError,
)

# Runs inside the page. The config arrives as a JSON string and is handed to C3.
RENDER_SCRIPT = """(chartJson) => {
    if (typeof c3 === 'undefined') {
        throw new Error('C3 is not loaded in the chart page.');
    }
    c3.generate(JSON.parse(chartJson));
    return true;
}"""

MEASURE_SCRIPT = """(selector) => {
    const body = document.querySelector('body');
    const element = document.querySelector(selector);
    const rect = element.getBoundingClientRect();
    return {
        bodyWidth: body.scrollWidth,
        bodyHeight: body.scrollHeight,
        x: rect.left,
        y: rect.top,
        width: rect.right - rect.left,
        height: rect.bottom - rect.top,
    };
}"""


class RenderStage(enum.Enum):
    IDLE = "idle"
    NAVIGATED = "navigated"
    STYLE_INJECTED = "style injected"
    DATA_RENDERED = "data rendered"
    MEASURED = "measured"
    VIEWPORT_FIT = "viewport fit"
    CAPTURED = "captured"
    CLOSED = "closed"


@dataclass(frozen=True)
class Geometry:
    """Document size and chart rectangle measured from the live page."""
    body_width: int
    body_height: int
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_page(cls, values: dict) -> "Geometry":
        return cls(
            body_width=int(values['bodyWidth']),
            body_height=int(values['bodyHeight']),
            x=float(values['x']),
            y=float(values['y']),
            width=float(values['width']),
            height=float(values['height']),
        )

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def viewport(self) -> dict:
        return {'width': self.body_width, 'height': self.body_height}

    def clip(self) -> dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


def asset_tag(source: str) -> dict:
    """Options for addScriptTag/addStyleTag: a URL is fetched, anything else is a local file."""
    if source.startswith(('http://', 'https://', 'file://')):
        return {'url': source}
    path = Path(source)
    if not path.is_file():
        raise NavigationError(f"Chart library not found: {path}", RenderStage.NAVIGATED)
    return {'path': str(path.resolve())}


def _json_default(value):
    if hasattr(value, 'item'):
        return value.item()
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def serialize_chart(chart: dict) -> str:
    """Encodes the chart config for the page. NaN and infinities are rejected."""
    try:
        return json.dumps(chart, default=_json_default, allow_nan=False)
    except ValueError as e:
        raise InvalidChartDefinitionError(
            f"Chart definition cannot be sent to the chart engine: {e}"
        ) from e


class RenderSession:
    """
    A headless Chromium browser with one page that charts are rendered into.

    ``owned`` is fixed when the session is created: an owned session belongs to
    a single render call, which closes it. A session created by the caller
    (the default) is left open and can be reused. The lock keeps two renders
    from driving the same page at once.
    """

    def __init__(self, browser, page, owned: bool = False):
        self.browser = browser
        self.page = page
        self.owned = owned
        self.lock = asyncio.Lock()
        self._closed = False

    @classmethod
    async def launch(cls, show: bool = False, owned: bool = False) -> "RenderSession":
        logging.info("Launching headless browser to render chart...")
        launch_options = {
            'headless': not show,
            'args': config.BROWSER_ARGS,
        }
        if config.CHROMIUM_EXECUTABLE_PATH:
            launch_options['executablePath'] = config.CHROMIUM_EXECUTABLE_PATH
        try:
            browser = await launch(**launch_options)
        except Exception as e:
            logging.error(f"Could not launch headless browser: {e}")
            raise RenderError(f"Could not launch headless browser: {e}", RenderStage.IDLE) from e

        try:
            page = await browser.newPage()
            await page.setViewport(config.INITIAL_VIEWPORT)
        except BaseException:
            await browser.close()
            raise
        return cls(browser, page, owned=owned)

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self):
        """Closes the browser. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        logging.info("Closing headless browser.")
        await self.browser.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


class ChartRenderer:
    """
    Drives one render cycle on a session's page:
    navigate, inject style, render, measure, fit viewport, capture.
    """

    def __init__(
        self,
        session: RenderSession,
        css_file_path=None,
        wait_timeout_ms: int = config.DEFAULT_WAIT_TIMEOUT_MS,
        template_path: Path = config.CHART_TEMPLATE_PATH,
    ):
        self.session = session
        self.css_file_path = css_file_path
        self.wait_timeout_ms = wait_timeout_ms
        self.template_path = Path(template_path)
        self.stage = RenderStage.IDLE
        self.browser_errors = []

    def _on_console(self, message):
        kind = message.type
        text = message.text
        if kind == 'error':
            logging.error(f"LOG: {text}")
            self.browser_errors.append(text)
        elif kind in ('warning', 'warn'):
            logging.warning(f"LOG: {text}")
        else:
            logging.info(f"LOG: {text}")

    def _on_page_error(self, error):
        logging.error(f"Uncaught error in chart page: {error}")
        self.browser_errors.append(str(error))

    def _raise_browser_errors(self, stage: RenderStage):
        if self.browser_errors:
            raise RenderRuntimeError(f"Browser JavaScript error: {self.browser_errors[0]}", stage)

    async def render(self, chart, output_path) -> Geometry:
        """
        Renders the chart and writes the cropped screenshot to output_path.

        chart is the chart config dict, or the JSON string serialize_chart made of it.
        """
        if self.session.closed:
            raise RenderError("Render session is already closed.", self.stage)

        payload = chart if isinstance(chart, str) else serialize_chart(chart)
        page = self.session.page
        self.browser_errors = []
        page.on('console', self._on_console)
        page.on('pageerror', self._on_page_error)
        try:
            await self._navigate(page)
            if self.css_file_path:
                await self._inject_style(page)
            await self._render_data(page, payload)
            geometry = await self._measure(page)
            await self._fit_viewport(page, geometry)
            await self._capture(page, geometry, Path(output_path))
        finally:
            page.remove_listener('console', self._on_console)
            page.remove_listener('pageerror', self._on_page_error)
        return geometry

    async def _navigate(self, page):
        url = self.template_path.resolve().as_uri()
        logging.debug(f"Opening chart template {url}")
        try:
            await page.goto(url)
        except (PyppeteerError, PyppeteerTimeoutError) as e:
            logging.error(f"Failed to open chart template {url}: {e}")
            raise NavigationError(f"Failed to open chart template {url}: {e}", RenderStage.NAVIGATED) from e
        await self._load_libraries(page)
        self.stage = RenderStage.NAVIGATED

    async def _load_libraries(self, page):
        # D3 before C3; the C3 stylesheet before any user stylesheet so the latter wins
        loads = [
            (page.addScriptTag, config.D3_SCRIPT),
            (page.addScriptTag, config.C3_SCRIPT),
            (page.addStyleTag, config.C3_STYLESHEET),
        ]
        for add_tag, source in loads:
            tag = asset_tag(source)
            try:
                await add_tag(tag)
            except (OSError, PyppeteerError) as e:
                logging.error(f"Failed to load chart library {source}: {e}")
                raise NavigationError(
                    f"Failed to load chart library {source}: {e}", RenderStage.NAVIGATED
                ) from e
        self._raise_browser_errors(RenderStage.NAVIGATED)

    async def _inject_style(self, page):
        css_path = Path(self.css_file_path)
        if not css_path.is_file():
            logging.error(f"Stylesheet not found: {css_path}")
            raise StyleInjectionError(f"Stylesheet not found: {css_path}", RenderStage.STYLE_INJECTED)
        try:
            await page.addStyleTag({'path': str(css_path.resolve())})
        except (OSError, PyppeteerError) as e:
            logging.error(f"Failed to inject stylesheet {css_path}: {e}")
            raise StyleInjectionError(
                f"Failed to inject stylesheet {css_path}: {e}", RenderStage.STYLE_INJECTED
            ) from e
        self.stage = RenderStage.STYLE_INJECTED

    async def _render_data(self, page, payload: str):
        try:
            await page.evaluate(RENDER_SCRIPT, payload)
        except PyppeteerError as e:
            logging.error(f"Chart engine failed to render: {e}")
            raise RenderRuntimeError(
                f"Browser JavaScript error: {e}", RenderStage.DATA_RENDERED
            ) from e
        self._raise_browser_errors(RenderStage.DATA_RENDERED)
        self.stage = RenderStage.DATA_RENDERED

    async def _measure(self, page) -> Geometry:
        try:
            await page.waitForSelector(config.CHART_SELECTOR, {'timeout': self.wait_timeout_ms})
        except PyppeteerTimeoutError as e:
            self._raise_browser_errors(RenderStage.MEASURED)
            logging.error(f"Chart element {config.CHART_SELECTOR} did not appear: {e}")
            raise RenderTimeoutError(
                f"Chart element {config.CHART_SELECTOR} did not appear "
                f"within {self.wait_timeout_ms} ms.", RenderStage.MEASURED
            ) from e
        except PyppeteerError as e:
            raise RenderRuntimeError(
                f"Failed waiting for chart element: {e}", RenderStage.MEASURED
            ) from e
        self._raise_browser_errors(RenderStage.MEASURED)

        try:
            geometry = Geometry.from_page(await page.evaluate(MEASURE_SCRIPT, config.CHART_SELECTOR))
        except PyppeteerError as e:
            raise RenderRuntimeError(f"Failed to measure chart: {e}", RenderStage.MEASURED) from e
        if geometry.is_empty:
            raise RenderRuntimeError(f"Rendered chart has no area: {geometry}", RenderStage.MEASURED)

        logging.debug(f"Measured chart geometry: {geometry}")
        self.stage = RenderStage.MEASURED
        return geometry

    async def _fit_viewport(self, page, geometry: Geometry):
        # The whole document is laid out at full size before the chart is cropped from it
        try:
            await page.setViewport(geometry.viewport())
        except PyppeteerError as e:
            raise ViewportError(f"Failed to resize viewport: {e}", RenderStage.VIEWPORT_FIT) from e
        # C3 redraws on resize, which can fail in the page
        self._raise_browser_errors(RenderStage.VIEWPORT_FIT)
        self.stage = RenderStage.VIEWPORT_FIT

    async def _capture(self, page, geometry: Geometry, output_path: Path):
        if not output_path.parent.is_dir():
            raise CaptureWriteError(
                f"Output directory does not exist: {output_path.parent}", RenderStage.CAPTURED
            )
        try:
            await page.screenshot({'path': str(output_path), 'clip': geometry.clip()})
        except (OSError, PyppeteerError) as e:
            logging.error(f"Failed to write chart image {output_path}: {e}")
            output_path.unlink(missing_ok=True)
            raise CaptureWriteError(
                f"Failed to write chart image {output_path}: {e}", RenderStage.CAPTURED
            ) from e
        if self.browser_errors:
            logging.error(f"Discarding chart image {output_path} after a browser error.")
            output_path.unlink(missing_ok=True)
            self._raise_browser_errors(RenderStage.CAPTURED)
        self.stage = RenderStage.CAPTURED
        logging.info(f"Successfully generated chart image: {output_path}")
