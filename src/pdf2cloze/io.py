"""I/O utilities for the human-editable JSON files between stages."""

import json
import logging
from pathlib import Path
from typing import List, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import ClozeCard, Fact, cards_from_json, facts_from_json

logger = logging.getLogger(__name__)


def _write_json(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _read_json(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_facts(facts: Sequence[Fact], path: Path) -> None:
    """Save facts as ``{"points": [...]}``, the same shape the API returns."""
    _write_json({"points": [fact.model_dump() for fact in facts]}, path)
    logger.info(f"Saved {len(facts)} facts to {path}")


def load_facts(path: Path) -> List[Fact]:
    """Load facts written by save_facts, possibly edited by hand."""
    facts = facts_from_json(_read_json(path).get("points", []))
    logger.info(f"Loaded {len(facts)} facts from {path}")
    return facts


def save_cards(cards: Sequence[ClozeCard], path: Path) -> None:
    """Save cards as ``{"cards": [...]}``."""
    _write_json({"cards": [card.model_dump() for card in cards]}, path)
    logger.info(f"Saved {len(cards)} cards to {path}")


def load_cards(path: Path) -> List[ClozeCard]:
    """Load cards written by save_cards, possibly edited by hand."""
    cards = cards_from_json(_read_json(path).get("cards", []))
    logger.info(f"Loaded {len(cards)} cards from {path}")
    return cards


def _shorten(text: str, limit: int = 80) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def preview_facts(facts: Sequence[Fact], console: Console, max_items: int = 15) -> None:
    """Preview facts in a formatted table."""
    if not facts:
        console.print("No facts to preview", style="yellow")
        return

    shown = facts[:max_items]
    table = Table(title=f"Fact Preview ({len(shown)} of {len(facts)} facts)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Fact", style="green")

    for fact in shown:
        table.add_row(fact.id, Text(_shorten(fact.text, 120)))

    console.print(table)


def preview_cards(cards: Sequence[ClozeCard], console: Console, max_cards: int = 10) -> None:
    """Preview cards in a formatted table."""
    if not cards:
        console.print("No cards to preview", style="yellow")
        return

    shown = cards[:max_cards]
    table = Table(title=f"Card Preview ({len(shown)} of {len(cards)} cards)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Front", style="green", max_width=50)
    table.add_column("Back", style="blue", max_width=50)

    for card in shown:
        table.add_row(card.id, Text(_shorten(card.front)), Text(_shorten(card.back)))

    console.print(table)
