from .announcements import render_announcements
from .orchestrator import PipelineOptions, TranslationPipeline, estimate_processing_time_ms, options_from_config
from .realtime import RealtimePipeline

__all__ = [
    "PipelineOptions",
    "RealtimePipeline",
    "TranslationPipeline",
    "estimate_processing_time_ms",
    "options_from_config",
    "render_announcements",
]
