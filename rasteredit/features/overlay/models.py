from dataclasses import dataclass
from typing import Optional, Union

from rasteredit.domain.types import RgbaColor


@dataclass(frozen=True)
class NoOverlay:
    pass


@dataclass(frozen=True)
class GradientOverlay:
    """
    Linear gradient from color_a to color_b. An angle follows CSS
    linear-gradient(): 0 points up, 90 points right, clockwise. angle=None
    runs the gradient along the top-left to bottom-right diagonal of the
    output, whatever its aspect ratio.
    """

    color_a: RgbaColor = (255, 0, 0, 0.5)
    color_b: RgbaColor = (0, 0, 255, 0.5)
    angle: Optional[float] = None


@dataclass(frozen=True)
class PatternOverlay:
    """
    Repeating dot motif. Each spacing x spacing tile holds one dot of
    dot_radius at its center; the first tile starts at the top-left pixel.
    """

    dot_radius: float = 2.0
    spacing: int = 10
    color: RgbaColor = (0, 0, 0, 1.0)
    opacity: float = 0.1


Overlay = Union[NoOverlay, GradientOverlay, PatternOverlay]
