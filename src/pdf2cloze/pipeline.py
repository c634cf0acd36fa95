"""Single-document pipeline: PDF text to facts to cloze cards to deck package."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .build import DeckPackager
from .config import Config
from .extract import FactExtractor
from .llm import LLMProvider, create_llm_provider
from .models import ClozeCard, Fact
from .pdf import PDFProcessor
from .prompts import PromptManager, create_prompt_manager
from .synthesize import CardSynthesizer

logger = logging.getLogger(__name__)


class StudyDeckPipeline:
    """Runs the stages in order for one document.

    The LLM provider is created on first use so that packaging alone works
    without an API key.
    """

    def __init__(
        self,
        config: Config,
        llm_provider: Optional[LLMProvider] = None,
        prompt_manager: Optional[PromptManager] = None,
    ):
        self.config = config
        self._llm_provider = llm_provider
        self.prompt_manager = prompt_manager or create_prompt_manager()
        self.packager = DeckPackager(config.deck)

    @property
    def llm_provider(self) -> LLMProvider:
        if self._llm_provider is None:
            self._llm_provider = create_llm_provider(self.config.llm)
        return self._llm_provider

    def extract_text(self, pdf_path: Path) -> str:
        return PDFProcessor().extract_text(pdf_path)

    def extract_facts(self, text: str) -> List[Fact]:
        extractor = FactExtractor(self.llm_provider, self.prompt_manager, self.config.extraction)
        return extractor.extract(text)

    def generate_cards(self, facts: Sequence[Fact]) -> List[ClozeCard]:
        return CardSynthesizer(self.llm_provider, self.prompt_manager).generate(facts)

    def package(self, cards: Sequence[ClozeCard], deck_name: Optional[str] = None) -> bytes:
        return self.packager.package(cards, deck_name=deck_name)

    def run(self, pdf_path: Path, output_path: Path, deck_name: Optional[str] = None) -> Dict[str, Any]:
        """Run every stage on a PDF and write the package to ``output_path``."""
        logger.info(f"Processing {pdf_path}")

        text = self.extract_text(pdf_path)
        facts = self.extract_facts(text)
        cards = self.generate_cards(facts) if facts else []
        data = self.package(cards, deck_name=deck_name)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)

        logger.info(f"Deck written to {output_path}")

        return {
            "apkg_path": output_path,
            "facts": facts,
            "cards": cards,
            "deck_name": deck_name or self.config.deck.deck_name,
        }
