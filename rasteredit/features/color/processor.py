from rasteredit.domain.interfaces import IProcessor, PipelineContext
from rasteredit.domain.types import PixelBuffer
from rasteredit.features.color.logic import adjust_colors
from rasteredit.features.color.models import ColorAdjustment, FilterSelection


class ColorProcessor(IProcessor):
    """
    Slider adjustments plus the named filter.
    """

    name = "color"

    def __init__(self, adjustment: ColorAdjustment, selection: FilterSelection):
        self.adjustment = adjustment
        self.selection = selection

    def process(self, buffer: PixelBuffer, context: PipelineContext) -> PixelBuffer:
        return adjust_colors(buffer, self.adjustment, self.selection)
