"""
Application Layer

Pipeline orchestration and context management.
"""

from .pipeline import LabelScanPipeline, PipelineBuilder, ScanContext, scan_label

__all__ = [
    "LabelScanPipeline",
    "PipelineBuilder",
    "ScanContext",
    "scan_label",
]
