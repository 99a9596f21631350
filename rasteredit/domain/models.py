from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from rasteredit.domain.errors import InvalidOverlayError
from rasteredit.domain.types import PixelBuffer
from rasteredit.features.color.models import ColorAdjustment, FilterKind, FilterSelection
from rasteredit.features.geometry.models import CropRect, ResizeTarget
from rasteredit.features.overlay.models import (
    GradientOverlay,
    NoOverlay,
    Overlay,
    PatternOverlay,
)


class ImageFormat(Enum):
    PNG = "PNG"
    JPEG = "JPEG"

    @property
    def extension(self) -> str:
        return "png" if self is ImageFormat.PNG else "jpg"


@dataclass(frozen=True)
class ExportFormat:
    """
    Target encoding. Quality only applies to JPEG (1-100).
    """

    kind: ImageFormat = ImageFormat.PNG
    quality: int = 92

    @classmethod
    def png(cls) -> "ExportFormat":
        return cls(ImageFormat.PNG)

    @classmethod
    def jpeg(cls, quality: int = 92) -> "ExportFormat":
        return cls(ImageFormat.JPEG, quality)


OVERLAY_TYPES: Dict[str, type] = {
    "none": NoOverlay,
    "gradient": GradientOverlay,
    "pattern": PatternOverlay,
}

OVERLAY_COLOR_KEYS = ("color_a", "color_b", "color")


def overlay_to_dict(overlay: Overlay) -> Dict[str, Any]:
    for name, cls in OVERLAY_TYPES.items():
        if type(overlay) is cls:
            return {"type": name, **asdict(overlay)}
    raise TypeError(f"Unknown overlay type: {type(overlay).__name__}")


def overlay_from_dict(data: Optional[Dict[str, Any]]) -> Overlay:
    if not data:
        return NoOverlay()
    kind = str(data.get("type", "none")).lower()
    if kind not in OVERLAY_TYPES:
        raise ValueError(f"Unknown overlay type: {kind}")
    cls = OVERLAY_TYPES[kind]
    valid_keys = cls.__dataclass_fields__.keys()
    kwargs = {}
    for k, v in data.items():
        if k in valid_keys and v is not None:
            # JSON has no tuples
            kwargs[k] = tuple(v) if isinstance(v, list) else v
    for k in OVERLAY_COLOR_KEYS:
        if k in kwargs and (not isinstance(kwargs[k], tuple) or len(kwargs[k]) != 4):
            raise InvalidOverlayError(f"Overlay {k} must be [r, g, b, alpha], got {kwargs[k]!r}")
    return cls(**kwargs)


@dataclass(frozen=True)
class EditState:
    """
    Complete, immutable description of one edit pass.

    crop=None keeps the full frame; resize=None keeps the size produced by
    crop and rotation.
    """

    crop: Optional[CropRect] = None
    color: ColorAdjustment = field(default_factory=ColorAdjustment)
    filter: FilterSelection = field(default_factory=FilterSelection)
    rotation: float = 0.0
    resize: Optional[ResizeTarget] = None
    overlay: Overlay = field(default_factory=NoOverlay)

    @classmethod
    def for_source(cls, source: PixelBuffer) -> "EditState":
        """
        State of a freshly loaded image: full-frame crop, resize to source size.
        """
        return cls(
            crop=CropRect(0, 0, source.width, source.height),
            resize=ResizeTarget(source.width, source.height),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-friendly representation.
        """
        return {
            "crop": asdict(self.crop) if self.crop else None,
            "color": asdict(self.color),
            "filter": {
                "kind": self.filter.kind.value,
                "intensity": self.filter.intensity,
            },
            "rotation": self.rotation,
            "resize": asdict(self.resize) if self.resize else None,
            "overlay": overlay_to_dict(self.overlay),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditState":
        """
        From a settings file. Missing sections fall back to defaults.
        """

        def filter_keys(config_cls: Any, d: Optional[Dict[str, Any]]) -> Dict[str, Any]:
            valid_keys = config_cls.__dataclass_fields__.keys()
            return {k: v for k, v in (d or {}).items() if k in valid_keys and v is not None}

        filter_data = dict(data.get("filter") or {})
        if "kind" in filter_data:
            filter_data["kind"] = FilterKind(str(filter_data["kind"]).lower())

        crop_data = data.get("crop")
        resize_data = data.get("resize")

        return cls(
            crop=CropRect(**filter_keys(CropRect, crop_data)) if crop_data else None,
            color=ColorAdjustment(**filter_keys(ColorAdjustment, data.get("color"))),
            filter=FilterSelection(**filter_keys(FilterSelection, filter_data)),
            rotation=float(data.get("rotation") or 0.0),
            resize=ResizeTarget(**filter_keys(ResizeTarget, resize_data)) if resize_data else None,
            overlay=overlay_from_dict(data.get("overlay")),
        )
