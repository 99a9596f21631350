from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from rasteredit.domain.types import Dimensions, PixelBuffer


@dataclass
class PipelineContext:
    """
    Per-render bookkeeping passed through the stages.

    Owned by a single render call; stages only append to metrics.
    """

    original_size: Dimensions
    # Stage name -> output (height, width), in execution order
    metrics: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class IProcessor(Protocol):
    """
    Interface for any image processing stage.
    """

    name: str

    def process(self, buffer: PixelBuffer, context: PipelineContext) -> PixelBuffer: ...


class IImageSource(Protocol):
    """
    Interface for loading images.
    """

    def read(self) -> PixelBuffer: ...
