from rasteredit.domain.interfaces import IProcessor, PipelineContext
from rasteredit.domain.types import PixelBuffer
from rasteredit.features.geometry.logic import crop_buffer, resize_buffer, rotate_buffer
from rasteredit.features.geometry.models import CropRect, ResizeTarget


class CropProcessor(IProcessor):
    """
    Extracts the crop rectangle.
    """

    name = "crop"

    def __init__(self, rect: CropRect):
        self.rect = rect

    def process(self, buffer: PixelBuffer, context: PipelineContext) -> PixelBuffer:
        return crop_buffer(buffer, self.rect)


class RotateProcessor(IProcessor):
    """
    Rotates about the center of whatever the previous stage produced.
    """

    name = "rotate"

    def __init__(self, degrees: float):
        self.degrees = degrees

    def process(self, buffer: PixelBuffer, context: PipelineContext) -> PixelBuffer:
        return rotate_buffer(buffer, self.degrees)


class ResizeProcessor(IProcessor):
    name = "resize"

    def __init__(self, target: ResizeTarget):
        self.target = target

    def process(self, buffer: PixelBuffer, context: PipelineContext) -> PixelBuffer:
        return resize_buffer(buffer, self.target)
