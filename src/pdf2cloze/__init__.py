"""
pdf2cloze: Convert PDF documents to cloze flashcard decks using LLMs.
"""

__version__ = "0.1.0"

from .config import Config
from .build import DeckPackager, build_deck_package
from .extract import FactExtractor
from .synthesize import CardSynthesizer
from .validate import CardValidator

__all__ = [
    "Config",
    "DeckPackager",
    "build_deck_package",
    "FactExtractor",
    "CardSynthesizer",
    "CardValidator",
]
