"""Live multilingual audio relay for guided tours."""

from .config import Config
from .errors import TourLingoError
from .pipeline import PipelineOptions, TranslationPipeline
from .session import TourRoomClient

__version__ = "0.1.0"

__all__ = ["Config", "TourLingoError", "PipelineOptions", "TranslationPipeline", "TourRoomClient", "__version__"]
