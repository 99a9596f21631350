import dataclasses
from typing import List, Optional

from rasteredit.domain.errors import (
    InvalidCropError,
    InvalidOverlayError,
    InvalidResizeTargetError,
)
from rasteredit.domain.interfaces import IProcessor, PipelineContext
from rasteredit.domain.models import EditState
from rasteredit.domain.types import PixelBuffer, RgbaColor
from rasteredit.features.color.models import ColorAdjustment, FilterKind, FilterSelection
from rasteredit.features.color.processor import ColorProcessor
from rasteredit.features.geometry.logic import clamp_crop_rect, normalize_angle
from rasteredit.features.geometry.models import CropRect, ResizeTarget
from rasteredit.features.geometry.processor import (
    CropProcessor,
    ResizeProcessor,
    RotateProcessor,
)
from rasteredit.features.overlay.models import (
    GradientOverlay,
    NoOverlay,
    Overlay,
    PatternOverlay,
)
from rasteredit.features.overlay.processor import OverlayProcessor
from rasteredit.kernel.performance import time_function
from rasteredit.kernel.system.logging import get_logger
from rasteredit.kernel.validation import clamp, validate_float, validate_int

logger = get_logger(__name__)

SLIDER_MIN = 0.0
SLIDER_MAX = 200.0


def _clamp_slider(val: float) -> float:
    return clamp(validate_float(val, 100.0), SLIDER_MIN, SLIDER_MAX)


def _clamp_color(color: RgbaColor) -> RgbaColor:
    if not isinstance(color, (tuple, list)) or len(color) != 4:
        raise InvalidOverlayError(f"Overlay color must be (r, g, b, alpha), got {color!r}")
    r, g, b, a = color
    return (
        int(clamp(validate_int(r), 0, 255)),
        int(clamp(validate_int(g), 0, 255)),
        int(clamp(validate_int(b), 0, 255)),
        clamp(validate_float(a, 1.0), 0.0, 1.0),
    )


def validate_crop(rect: Optional[CropRect], source: PixelBuffer) -> CropRect:
    """
    Clamps the crop to the source. None selects the full frame.
    """
    if rect is None:
        return CropRect(0, 0, source.width, source.height)
    rect = CropRect(
        validate_int(rect.x),
        validate_int(rect.y),
        validate_int(rect.width),
        validate_int(rect.height),
    )
    if rect.width <= 0 or rect.height <= 0:
        raise InvalidCropError(f"Crop must have a positive area, got {rect.width}x{rect.height}")

    roi = clamp_crop_rect(rect, source.height, source.width)
    if roi is None:
        raise InvalidCropError(
            f"Crop {rect} lies outside the {source.width}x{source.height} image"
        )
    y1, y2, x1, x2 = roi
    return CropRect(x1, y1, x2 - x1, y2 - y1)


def validate_resize(target: Optional[ResizeTarget]) -> Optional[ResizeTarget]:
    if target is None:
        return None
    width, height = validate_int(target.width), validate_int(target.height)
    if width <= 0 or height <= 0:
        raise InvalidResizeTargetError(
            f"Resize target must be positive, got {target.width}x{target.height}"
        )
    return ResizeTarget(width, height)


def validate_color(adjustment: ColorAdjustment) -> ColorAdjustment:
    return ColorAdjustment(
        brightness=_clamp_slider(adjustment.brightness),
        contrast=_clamp_slider(adjustment.contrast),
        saturation=_clamp_slider(adjustment.saturation),
        hue_degrees=normalize_angle(validate_float(adjustment.hue_degrees)),
    )


def validate_filter(selection: FilterSelection) -> FilterSelection:
    if not isinstance(selection.kind, FilterKind):
        raise TypeError(f"Unknown filter: {selection.kind!r}")
    intensity = clamp(validate_float(selection.intensity, 100.0), 0.0, 100.0)
    return FilterSelection(selection.kind, intensity)


def validate_overlay(overlay: Overlay) -> Overlay:
    if isinstance(overlay, NoOverlay):
        return overlay
    if isinstance(overlay, GradientOverlay):
        return dataclasses.replace(
            overlay,
            color_a=_clamp_color(overlay.color_a),
            color_b=_clamp_color(overlay.color_b),
            angle=None if overlay.angle is None else validate_float(overlay.angle),
        )
    if isinstance(overlay, PatternOverlay):
        return dataclasses.replace(
            overlay,
            dot_radius=max(0.0, validate_float(overlay.dot_radius)),
            spacing=max(1, validate_int(overlay.spacing, 1)),
            color=_clamp_color(overlay.color),
            opacity=clamp(validate_float(overlay.opacity), 0.0, 1.0),
        )
    raise TypeError(f"Unsupported overlay: {type(overlay).__name__}")


def validate_edit_state(state: EditState, source: PixelBuffer) -> EditState:
    """
    Clamps every slider into range and rejects shapes that cannot be rendered.

    Raises:
        InvalidCropError: zero-area crop, or crop fully outside the source.
        InvalidResizeTargetError: zero or negative resize dimension.
        InvalidOverlayError: overlay color that is not an (r, g, b, alpha) quadruple.
    """
    return EditState(
        crop=validate_crop(state.crop, source),
        color=validate_color(state.color),
        filter=validate_filter(state.filter),
        rotation=normalize_angle(validate_float(state.rotation)),
        resize=validate_resize(state.resize),
        overlay=validate_overlay(state.overlay),
    )


def build_stages(state: EditState) -> List[IProcessor]:
    """
    Fixed stage order: crop -> color -> rotate -> resize -> overlay.
    `state` must already be validated.
    """
    stages: List[IProcessor] = []
    if state.crop is not None:
        stages.append(CropProcessor(state.crop))
    stages.append(ColorProcessor(state.color, state.filter))
    stages.append(RotateProcessor(state.rotation))
    if state.resize is not None:
        stages.append(ResizeProcessor(state.resize))
    stages.append(OverlayProcessor(state.overlay))
    return stages


class EditPipeline:
    """
    Renders a source image under an EditState.

    Stateless: every call starts over from the untouched source, so the same
    (source, state) always yields the same bytes and repeated edits never
    accumulate rounding error.
    """

    @time_function
    def render(
        self,
        source: PixelBuffer,
        state: EditState,
        context: Optional[PipelineContext] = None,
    ) -> PixelBuffer:
        if context is None:
            context = PipelineContext(original_size=source.size)

        valid_state = validate_edit_state(state, source)

        current = source
        for stage in build_stages(valid_state):
            current = stage.process(current, context)
            context.metrics[stage.name] = current.size
            logger.debug(f"Stage {stage.name}: {current.width}x{current.height}")

        return current


def render(source: PixelBuffer, state: EditState) -> PixelBuffer:
    """Module-level shortcut for EditPipeline().render()."""
    return EditPipeline().render(source, state)
