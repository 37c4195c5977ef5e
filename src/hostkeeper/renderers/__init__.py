"""Output format renderers."""

from hostkeeper.renderers.base import BaseRenderer, OutputFormat, RenderContext, Renderer
from hostkeeper.renderers.json import JSONRenderer
from hostkeeper.renderers.slack import SlackRenderer
from hostkeeper.renderers.terminal import TerminalRenderer
from hostkeeper.renderers.text import PlainTextRenderer

__all__ = [
    "BaseRenderer",
    "OutputFormat",
    "RenderContext",
    "Renderer",
    "JSONRenderer",
    "PlainTextRenderer",
    "SlackRenderer",
    "TerminalRenderer",
]


def get_renderer(format: OutputFormat | str) -> BaseRenderer:
    """Get a renderer for the specified format.

    Raises:
        ValueError: If format is not supported
    """
    if isinstance(format, str):
        format = OutputFormat(format)

    renderers = {
        OutputFormat.TEXT: PlainTextRenderer,
        OutputFormat.SLACK: SlackRenderer,
        OutputFormat.JSON: JSONRenderer,
        OutputFormat.TERMINAL: TerminalRenderer,
    }

    renderer_class = renderers.get(format)
    if renderer_class is None:
        raise ValueError(f"Unsupported format: {format}")

    return renderer_class()
