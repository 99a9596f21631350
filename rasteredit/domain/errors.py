class RasterEditError(Exception):
    """
    Base class for every error raised by the editing core.
    """


class PipelineError(RasterEditError):
    """
    Edit parameters that cannot be coerced into a renderable state.
    """


class InvalidCropError(PipelineError, ValueError):
    """Crop rectangle is zero-area, or lies fully outside the source."""


class InvalidResizeTargetError(PipelineError, ValueError):
    """Resize target has a zero (or negative) width or height."""


class InvalidOverlayError(PipelineError, ValueError):
    """Overlay color is not an (r, g, b, alpha) quadruple."""


class DecodeError(RasterEditError):
    """
    Source bitmap could not be produced (unsupported format, corrupt data,
    missing file, network failure).
    """


class ExportError(RasterEditError):
    pass


class EncodeError(ExportError, ValueError):
    """Unsupported target format, or quality outside 1-100."""
