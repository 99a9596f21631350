from rasteredit.domain.interfaces import IProcessor, PipelineContext
from rasteredit.domain.types import PixelBuffer
from rasteredit.features.overlay.logic import apply_overlay
from rasteredit.features.overlay.models import Overlay


class OverlayProcessor(IProcessor):
    """
    Final stage. Works in output pixel space, so pattern phase and gradient
    angle do not depend on crop, rotation or resize.
    """

    name = "overlay"

    def __init__(self, overlay: Overlay):
        self.overlay = overlay

    def process(self, buffer: PixelBuffer, context: PipelineContext) -> PixelBuffer:
        return apply_overlay(buffer, self.overlay)
