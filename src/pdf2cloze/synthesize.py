"""Cloze card synthesis from extracted facts."""

import json
import logging
from typing import List, Optional, Sequence

from .llm import LLMProvider
from .models import ClozeCard, Fact
from .prompts import PromptManager, create_prompt_manager, get_default_system_prompt
from .validate import InputError

logger = logging.getLogger(__name__)


class CardSynthesizer:
    """Turns facts into cloze cards with one LLM call."""

    template_name = "generate_cards.j2"

    def __init__(self, llm_provider: LLMProvider, prompt_manager: Optional[PromptManager] = None):
        self.llm_provider = llm_provider
        self.prompt_manager = prompt_manager or create_prompt_manager()

    def generate(self, facts: Sequence[Fact]) -> List[ClozeCard]:
        """Generate one cloze card per fact.

        Cards are not validated here; the packager does that. An unparseable
        reply produces an empty list rather than an error, so callers cannot
        tell it apart from a reply that contained no cards.
        """
        if not facts:
            raise InputError("High-yield points are required")

        logger.info(f"Starting card generation for {len(facts)} points")

        prompt = self.prompt_manager.render_template(self.template_name, facts=facts)
        response = self.llm_provider.generate(
            prompt=prompt,
            system_prompt=get_default_system_prompt("generate_cards"),
        )

        cards = parse_cards(response.content)
        logger.info(f"Parsed {len(cards)} cloze cards")
        return cards


def parse_cards(text: str) -> List[ClozeCard]:
    """Parse the JSON array embedded in a free-form reply.

    Everything before the first ``[`` and after the last ``]`` is ignored.
    Elements without both a ``front`` and a ``back`` are dropped; the card id
    is the element's position in the array. Malformed JSON is logged and
    yields no cards.
    """
    if not text:
        return []

    start = text.find("[")
    end = text.rfind("]") + 1
    if start == -1 or end <= start:
        logger.warning("No JSON array found in card generation response")
        return []

    # JSONDecodeError is a ValueError; oversized integers and deep nesting fail here too
    try:
        data = json.loads(text[start:end])
    except (ValueError, RecursionError) as e:
        logger.error(f"Error parsing JSON response: {e}")
        logger.debug(f"Response was: {text[:500]}")
        return []

    cards = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            logger.debug(f"Skipping non-object element at {index}")
            continue

        front = item.get("front")
        back = item.get("back")
        if not front or not back:
            logger.debug(f"Skipping element {index} without front/back")
            continue

        cards.append(ClozeCard(id=str(index), front=str(front), back=str(back)))

    return cards
