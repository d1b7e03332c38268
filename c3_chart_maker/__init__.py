"""Render C3 charts from tabular data to cropped PNG images with headless Chromium."""
from c3_chart_maker.chart_maker import RenderOptions, prepare_chart, render_chart, render_chart_sync
from c3_chart_maker.errors import (
    CaptureWriteError,
    ChartGeneratorError,
    ChartMakerError,
    ConfigParseError,
    InvalidChartDefinitionError,
    InvalidDefinitionError,
    NavigationError,
    RenderError,
    RenderRuntimeError,
    RenderTimeoutError,
    SessionCloseError,
    StyleInjectionError,
    UnsupportedChartFormatError,
    ViewportError,
)
from c3_chart_maker.generators.chart_renderer import Geometry, RenderSession, RenderStage

__all__ = [
    "CaptureWriteError",
    "ChartGeneratorError",
    "ChartMakerError",
    "ConfigParseError",
    "Geometry",
    "InvalidChartDefinitionError",
    "InvalidDefinitionError",
    "NavigationError",
    "RenderError",
    "RenderOptions",
    "RenderRuntimeError",
    "RenderSession",
    "RenderStage",
    "RenderTimeoutError",
    "SessionCloseError",
    "StyleInjectionError",
    "UnsupportedChartFormatError",
    "ViewportError",
    "prepare_chart",
    "render_chart",
    "render_chart_sync",
]
