"""High-yield fact extraction from document text."""

import logging
import re
from typing import List, Optional

from .config import ExtractionConfig
from .llm import LLMProvider
from .models import Fact
from .prompts import PromptManager, create_prompt_manager, get_default_system_prompt
from .validate import InputError

logger = logging.getLogger(__name__)

ORDINAL_PREFIX = re.compile(r"^\d+[.)\-\s]+")


class FactExtractor:
    """Asks the LLM for a numbered list of facts and parses the reply."""

    template_name = "extract_facts.j2"

    def __init__(
        self,
        llm_provider: LLMProvider,
        prompt_manager: Optional[PromptManager] = None,
        config: Optional[ExtractionConfig] = None,
    ):
        self.llm_provider = llm_provider
        self.prompt_manager = prompt_manager or create_prompt_manager()
        self.config = config or ExtractionConfig()

    def extract(self, text: str) -> List[Fact]:
        """Extract up to ``max_facts`` facts from raw document text.

        Raises InputError for empty text and lets RemoteServiceError from the
        LLM call propagate. A reply that yields no usable lines is not an
        error; the result is simply shorter, possibly empty.
        """
        if not text or not text.strip():
            raise InputError("PDF text is required")

        logger.info(f"Starting fact extraction. Text length: {len(text)}")

        prompt = self.prompt_manager.render_template(
            self.template_name,
            text=text,
            max_facts=self.config.max_facts,
        )
        response = self.llm_provider.generate(
            prompt=prompt,
            system_prompt=get_default_system_prompt("extract_facts"),
        )

        facts = parse_facts(
            response.content,
            max_facts=self.config.max_facts,
            min_length=self.config.min_fact_length,
        )
        logger.info(f"Extracted {len(facts)} facts total")
        return facts


def parse_facts(text: str, max_facts: int = 15, min_length: int = 5) -> List[Fact]:
    """Parse a numbered-list reply into facts.

    Each non-blank line loses its leading ordinal marker (``1.``, ``2)``,
    ``3 -``) and is kept when the remainder is longer than ``min_length``
    characters. The fact id is the zero-based line index, so ids skip over
    rejected lines. Only the first ``max_facts`` accepted lines are returned.
    """
    facts = []
    if not text:
        return facts

    for index, line in enumerate(text.split("\n")):
        if not line.strip():
            continue

        cleaned = ORDINAL_PREFIX.sub("", line).strip()
        if len(cleaned) > min_length:
            facts.append(Fact(id=str(index), text=cleaned))
            logger.debug(f"Fact {len(facts)}: {cleaned[:80]}")

    if len(facts) > max_facts:
        logger.debug(f"Truncating {len(facts)} parsed facts to {max_facts}")

    return facts[:max_facts]
