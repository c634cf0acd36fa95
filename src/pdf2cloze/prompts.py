"""Prompt template management using Jinja2."""

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class PromptManager:
    """Manages prompt templates and rendering."""

    def __init__(self, templates_dir: Optional[Path] = None):
        """Initialize prompt manager with template directory."""
        self.templates_dir = Path(templates_dir or TEMPLATES_DIR)

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

    def get_template(self, template_name: str) -> Template:
        """Get a template by name."""
        try:
            return self.env.get_template(template_name)
        except Exception as e:
            logger.error(f"Failed to load template {template_name}: {e}")
            raise

    def render_template(self, template_name: str, **kwargs) -> str:
        """Render a template with the given variables."""
        template = self.get_template(template_name)
        return template.render(**kwargs)

    def list_templates(self) -> list[str]:
        """List all available templates."""
        if not self.templates_dir.exists():
            return []
        return sorted(file.name for file in self.templates_dir.glob("*.j2"))


DEFAULT_SYSTEM_PROMPTS = {
    "extract_facts": """You are an expert educator. Your task is to identify and extract the 15 most important facts from the provided text that students must learn.
Focus on facts that are testable, memorable, and have clear learning value.""",

    "generate_cards": """You are an expert at creating high-quality Anki cloze deletion flashcards.
Anki cloze format uses {{c1::answer}}, {{c2::answer}}, etc. to mark deletions.
Each card should test ONE key concept with a natural-sounding front and clear explanation on back.""",
}


def get_default_system_prompt(task: str) -> str:
    """Get the fixed system prompt for a pipeline task."""
    return DEFAULT_SYSTEM_PROMPTS[task]


def create_prompt_manager(templates_dir: Optional[Path] = None) -> PromptManager:
    """Factory function to create a prompt manager."""
    return PromptManager(templates_dir)
