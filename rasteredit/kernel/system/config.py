import os
from dataclasses import dataclass
from typing import Dict, Optional

from rasteredit.domain.models import EditState, ExportFormat
from rasteredit.features.overlay.models import GradientOverlay, NoOverlay, Overlay, PatternOverlay
from rasteredit.kernel.validation import validate_int


@dataclass
class AppConfig:
    user_dir: str
    default_export_dir: str
    default_jpeg_quality: int
    filename_pattern: str
    url_timeout_s: float
    max_download_bytes: int
    perf_log_path: Optional[str]


# User dir env (defaults to ./user under the working directory)
BASE_USER_DIR = os.path.abspath(os.getenv("RASTEREDIT_USER_DIR", "user"))

# Global application constants
APP_CONFIG = AppConfig(
    user_dir=BASE_USER_DIR,
    default_export_dir=os.path.join(BASE_USER_DIR, "export"),
    default_jpeg_quality=min(
        100, max(1, validate_int(os.getenv("RASTEREDIT_JPEG_QUALITY"), 92))
    ),
    filename_pattern="edited_image",
    url_timeout_s=15.0,
    max_download_bytes=64 * 1024 * 1024,
    perf_log_path=os.getenv("RASTEREDIT_PERF_LOG") or None,
)

# Edit applied to a freshly loaded image before the user touches anything
DEFAULT_EDIT_STATE = EditState()

DEFAULT_EXPORT_FORMAT = ExportFormat.png()

# Overlays offered by the editor, by name
OVERLAY_PRESETS: Dict[str, Overlay] = {
    "none": NoOverlay(),
    "gradient": GradientOverlay(
        color_a=(255, 0, 0, 0.5),
        color_b=(0, 0, 255, 0.5),
        angle=None,  # top-left corner to bottom-right corner
    ),
    "pattern": PatternOverlay(
        dot_radius=2.0,
        spacing=10,
        color=(0, 0, 0, 1.0),
        opacity=0.1,
    ),
}
