"""
Processing pipeline components.

This module provides a set of processor classes for the HL7Annotate
workflow. Each processor implements a specific stage of the pipeline.
"""

from .base import Processor
from .capture_processor import CaptureProcessor
from .resolution_processor import ResolutionProcessor
from .writeback_processor import WriteBackProcessor

__all__ = [
    "CaptureProcessor",
    "Processor",
    "ResolutionProcessor",
    "WriteBackProcessor",
]
