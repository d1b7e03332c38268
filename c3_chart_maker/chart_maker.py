# c3_chart_maker/chart_maker.py
import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from c3_chart_maker import config
from c3_chart_maker.chart_spec import resolve_chart_spec
from c3_chart_maker.data_processor import as_table, load_table
from c3_chart_maker.errors import InvalidDefinitionError, SessionCloseError
from c3_chart_maker.generators.chart_renderer import (
    ChartRenderer,
    RenderSession,
    RenderStage,
    serialize_chart,
)
from c3_chart_maker.series_binder import bind_series


@dataclass
class RenderOptions:
    """
    Options for a single render.

    show:            show the browser window instead of running headless.
    css_file_path:   stylesheet injected into the page before the chart renders.
    dump_chart:      print the resolved chart config to stdout before rendering.
    wait_timeout_ms: how long to wait for the chart's SVG to appear.
    chart_args:      extra arguments handed to chart generator functions.
    delimiter:       field separator of the input file, inferred when omitted.
    """
    show: bool = False
    css_file_path: Optional[str] = None
    dump_chart: bool = config.DUMP_CHART
    wait_timeout_ms: int = config.DEFAULT_WAIT_TIMEOUT_MS
    chart_args: dict = field(default_factory=dict)
    delimiter: Optional[str] = None


def _coerce_options(options) -> RenderOptions:
    if options is None:
        return RenderOptions()
    if isinstance(options, dict):
        try:
            options = RenderOptions(**options)
        except TypeError as e:
            raise InvalidDefinitionError(f"Invalid render options: {e}") from e
    if not isinstance(options, RenderOptions):
        raise InvalidDefinitionError(
            f"Expected options to be RenderOptions or a dict, got {type(options).__name__}."
        )
    if options.css_file_path is not None and not isinstance(options.css_file_path, (str, Path)):
        raise InvalidDefinitionError("Expected options.css_file_path (if specified) to be a path.")
    return options


def prepare_chart(data_source, chart_spec, options: RenderOptions = None) -> dict:
    """
    Loads the data, resolves the chart definition and binds the data into it.

    Columns of a table loaded from delimited text are still text, so series
    columns are coerced to numbers; in-memory tables are used as given.
    """
    options = _coerce_options(options)
    if isinstance(data_source, (str, Path)):
        table = load_table(data_source, options.delimiter)
        from_text = True
    else:
        table = as_table(data_source)
        from_text = False

    chart = resolve_chart_spec(chart_spec, table, options.chart_args)
    return bind_series(chart, table, coerce=from_text)


async def _close_after_failure(session: RenderSession, error: BaseException):
    try:
        await session.close()
    except Exception as close_error:
        logging.error(
            f"Failed to close browser after render error ({error!r}): {close_error}"
        )


async def render_chart(
    data_source,
    chart_spec,
    output_path,
    options=None,
    session: Optional[RenderSession] = None,
) -> Path:
    """
    Renders a C3 chart from tabular data to a cropped PNG at output_path.

    data_source: path to a delimited text file, a DataFrame or a list of row dicts.
    chart_spec:  path to a .json or .py chart definition, a generator function,
                 or the chart config dict itself.
    session:     an open RenderSession to reuse. Without one, a browser is
                 launched for this call and closed before it returns.
    """
    if not isinstance(output_path, (str, Path)):
        raise InvalidDefinitionError("Expected output_path to be a string or a path.")
    if session is not None and not isinstance(session, RenderSession):
        raise InvalidDefinitionError(
            f"Expected session to be a RenderSession, got {type(session).__name__}."
        )
    options = _coerce_options(options)

    chart = prepare_chart(data_source, chart_spec, options)
    if options.dump_chart:
        print(json.dumps(chart, indent=4, default=str))
    # Rejected before any browser is started
    payload = serialize_chart(chart)

    if session is None:
        session = await RenderSession.launch(show=options.show, owned=True)

    renderer = ChartRenderer(
        session,
        css_file_path=options.css_file_path,
        wait_timeout_ms=options.wait_timeout_ms,
    )
    try:
        async with session.lock:
            await renderer.render(payload, output_path)
    except BaseException as e:
        if not isinstance(e, asyncio.CancelledError):
            stage = getattr(e, "stage", None) or renderer.stage
            logging.error(f"Chart rendering failed at stage '{stage.value}': {e}")
        if session.owned:
            await _close_after_failure(session, e)
        raise

    if session.owned:
        try:
            await session.close()
        except Exception as e:
            raise SessionCloseError(f"Failed to close browser after rendering: {e}") from e
        renderer.stage = RenderStage.CLOSED

    return Path(output_path)


def render_chart_sync(data_source, chart_spec, output_path, options=None) -> Path:
    """Blocking wrapper around render_chart, for scripts without an event loop."""
    return asyncio.run(render_chart(data_source, chart_spec, output_path, options))
