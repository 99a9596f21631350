from dataclasses import dataclass


@dataclass(frozen=True)
class CropRect:
    """
    Sub-rectangle in source pixel coordinates. May extend past the source;
    it is clamped before use.
    """

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


@dataclass(frozen=True)
class ResizeTarget:
    width: int
    height: int
