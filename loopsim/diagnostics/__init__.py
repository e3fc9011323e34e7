"""Trace capture and export."""

from loopsim.diagnostics.event import TRACE_EVENT_SCHEMA_VERSION, DiagnosticEvent
from loopsim.diagnostics.hub import DiagnosticHub
from loopsim.diagnostics.json_codec import dumps_bytes, dumps_text
from loopsim.diagnostics.ring_buffer import RingBuffer
from loopsim.diagnostics.trace import TraceRecorder

__all__ = [
    "DiagnosticEvent",
    "DiagnosticHub",
    "RingBuffer",
    "TRACE_EVENT_SCHEMA_VERSION",
    "TraceRecorder",
    "dumps_bytes",
    "dumps_text",
]
