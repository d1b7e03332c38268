# c3_chart_maker/errors.py
"""Exceptions raised by the chart pipeline.

Every failure is fatal to a single ``render_chart`` call. Errors raised by
the render driver carry the stage that failed in ``error.stage``.
"""


class ChartMakerError(Exception):
    """Base class for all chart maker errors."""


class InvalidDefinitionError(ChartMakerError):
    """The caller passed malformed arguments."""


class InvalidChartDefinitionError(InvalidDefinitionError):
    """The chart definition is not a usable chart config object."""


class ConfigParseError(ChartMakerError):
    """A JSON chart definition file could not be read or parsed."""


class UnsupportedChartFormatError(ChartMakerError):
    """The chart definition path has neither a .json nor a .py extension."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(
            f"Unable to determine type of chart file {self.path}, "
            "expected a .json or .py file."
        )


class ChartGeneratorError(ChartMakerError):
    """A chart generator script failed to load or raised while building the chart."""


class RenderError(ChartMakerError):
    """A step of the headless render cycle failed."""

    stage = None

    def __init__(self, message, stage=None):
        if stage is not None:
            self.stage = stage
        super().__init__(message)


class NavigationError(RenderError):
    pass


class StyleInjectionError(RenderError):
    pass


class RenderRuntimeError(RenderError):
    """The chart engine threw, or the page reported a JavaScript error."""


class RenderTimeoutError(RenderError):
    """The chart element never appeared within the readiness timeout."""


class ViewportError(RenderError):
    pass


class CaptureWriteError(RenderError):
    """The cropped screenshot could not be written to the output path."""


class SessionCloseError(ChartMakerError):
    """Closing a self-owned render session failed after a successful render."""
