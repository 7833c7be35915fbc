"""Layout sinks: the PDF writer and an in-memory recorder."""

from .base import LayoutSink
from .pdf_renderer import PdfSink
from .recording_sink import RecordingSink

__all__ = ["LayoutSink", "PdfSink", "RecordingSink"]
