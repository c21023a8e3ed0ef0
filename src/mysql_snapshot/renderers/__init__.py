"""Output renderers for collected snapshots."""

from .base import BaseRenderer
from .json import JSONRenderer
from .markdown import MarkdownRenderer
from .plaintext import PlainTextRenderer
from .xml import XMLRenderer
from ..errors import UnsupportedFormatError

__all__ = [
    "BaseRenderer",
    "JSONRenderer",
    "MarkdownRenderer",
    "PlainTextRenderer",
    "XMLRenderer",
    "create_renderer",
]


def create_renderer(output_format: str) -> BaseRenderer:
    """
    Factory function to create the renderer for an output format.

    Args:
        output_format: Canonical format name (markdown, xml, plaintext, json)

    Returns:
        Renderer instance

    Raises:
        UnsupportedFormatError: If no renderer exists for the format
    """
    renderers = {
        "markdown": MarkdownRenderer,
        "xml": XMLRenderer,
        "plaintext": PlainTextRenderer,
        "json": JSONRenderer,
    }

    renderer_class = renderers.get(output_format)

    if renderer_class is None:
        raise UnsupportedFormatError(
            f"Unsupported output format: {output_format}. "
            f"Supported formats: {', '.join(renderers.keys())}"
        )

    return renderer_class()
