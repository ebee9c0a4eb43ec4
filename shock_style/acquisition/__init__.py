from .base import CaptureSource, ImageNormalizer
from .encoder import ImageEncoder
from .normalizer import PillowNormalizer
from .pipeline import ImageAcquisitionPipeline
from .sources import LocalFileSource

__all__ = [
    "CaptureSource",
    "ImageNormalizer",
    "ImageEncoder",
    "PillowNormalizer",
    "ImageAcquisitionPipeline",
    "LocalFileSource",
]
