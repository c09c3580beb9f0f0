"""
Pipeline Module

Contains pipeline orchestration, context management, and stage definitions.
"""

from .orchestrator import LabelScanPipeline, PipelineBuilder, scan_label
from .context import ScanContext, StageMetrics
from .stages import PipelineStageExecutor, PreprocessingStage, RecognitionStage, ParsingStage

__all__ = [
    "LabelScanPipeline",
    "PipelineBuilder",
    "scan_label",
    "ScanContext",
    "StageMetrics",
    "PipelineStageExecutor",
    "PreprocessingStage",
    "RecognitionStage",
    "ParsingStage",
]
