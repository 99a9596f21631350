from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ColorAdjustment:
    """
    Slider values. Percentages where 100.0 is identity, range 0-200.
    """

    brightness: float = 100.0
    contrast: float = 100.0
    saturation: float = 100.0
    hue_degrees: float = 0.0

    @property
    def is_identity(self) -> bool:
        return (
            self.brightness == 100.0
            and self.contrast == 100.0
            and self.saturation == 100.0
            and self.hue_degrees % 360.0 == 0.0
        )


class FilterKind(Enum):
    NONE = "none"
    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    VINTAGE = "vintage"


@dataclass(frozen=True)
class FilterSelection:
    """
    Named filter plus intensity (0 = no visible effect, 100 = full effect).
    """

    kind: FilterKind = FilterKind.NONE
    intensity: float = 100.0

    @property
    def is_active(self) -> bool:
        return self.kind is not FilterKind.NONE and self.intensity > 0.0


@dataclass(frozen=True)
class FilterRecipe:
    """
    Composite filter expressed through the primitive color steps.
    """

    brightness: float = 1.0
    contrast: float = 1.0
    saturation: float = 1.0
    sepia: float = 0.0
    grayscale: float = 0.0
