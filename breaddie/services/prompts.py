"""Jinja2 rendering of the prompt templates shipped in ``breaddie/prompts``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

logger = logging.getLogger("breaddie.services.prompts")

DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"


class PromptRenderer:
    """Renders prompts from Jinja2 templates."""

    def __init__(self, prompts_dir: str | Path = DEFAULT_PROMPTS_DIR) -> None:
        self.prompts_dir = Path(prompts_dir)

        if not self.prompts_dir.exists():
            logger.warning("Prompts directory does not exist", extra={"path": str(self.prompts_dir)})

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.prompts_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
            autoescape=False,  # plain-text prompts  # noqa: S701
        )

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """
        Render ``template_name`` (e.g. ``"story/user.txt"``) with ``context``.

        Raises:
            jinja2.TemplateNotFound: If template file doesn't exist
            jinja2.UndefinedError: If the template references a missing variable
        """
        template = self.jinja_env.get_template(template_name)
        rendered: str = template.render(**context)

        logger.debug(
            "Rendered prompt template",
            extra={
                "template": template_name,
                "context_keys": sorted(context),
                "rendered_length": len(rendered),
            },
        )
        return rendered


__all__ = ["DEFAULT_PROMPTS_DIR", "PromptRenderer"]
