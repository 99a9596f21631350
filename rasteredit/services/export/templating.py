import datetime
from typing import Any, Dict

from jinja2 import BaseLoader, Environment, TemplateError

from rasteredit.kernel.system.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASENAME = "edited_image"


class FilenameTemplater:
    """
    Handles generation of export filenames using Jinja2 templates.
    """

    def __init__(self) -> None:
        # Using a minimal environment for performance and safety
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, pattern: str, context: Dict[str, Any]) -> str:
        """
        Renders the filename pattern with the provided context.
        Falls back to "edited_<original_name>" when the pattern is broken or
        renders to nothing.
        """
        render_context = {"date": datetime.date.today().isoformat(), **context}
        try:
            rendered = self.env.from_string(pattern).render(render_context).strip()
        except TemplateError as e:
            logger.warning(f"Invalid filename pattern {pattern!r}: {e}")
            rendered = ""

        if not rendered:
            original = context.get("original_name")
            return f"edited_{original}" if original else DEFAULT_BASENAME
        # Templates must not escape the export directory
        return rendered.replace("/", "_").replace("\\", "_")
