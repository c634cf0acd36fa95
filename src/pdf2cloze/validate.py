"""Structural validation of cloze cards before packaging."""

import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from .models import ClozeCard

logger = logging.getLogger(__name__)

CLOZE_OPENINGS = ("{{c", "{c")


class InputError(ValueError):
    """A required request field is missing or empty."""
    pass


class ValidationError(Exception):
    """Cards failed structural validation.

    ``errors`` holds every per-card message in card order.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"Card validation failed: {', '.join(self.errors)}")


class ValidationResult(BaseModel):
    """Outcome of validating a list of cards."""
    valid: bool
    errors: List[str] = Field(default_factory=list)


class CardValidator:
    """Checks that cards carry a cloze marker and a non-empty answer."""

    def validate(self, cards: Optional[Sequence[ClozeCard]]) -> ValidationResult:
        """Validate cards and collect every error, tagged with its 1-based position."""
        if not cards:
            return ValidationResult(valid=False, errors=["No cards provided"])

        errors = []
        for position, card in enumerate(cards, start=1):
            if not card.front or not has_cloze_marker(card.front):
                errors.append(
                    f"Card {position}: Missing cloze deletion marker ({{{{c1::text}}}} format)"
                )

            if not card.back or not card.back.strip():
                errors.append(f"Card {position}: Missing explanation/answer")

        if errors:
            logger.warning(f"{len(errors)} validation error(s) across {len(cards)} cards")

        return ValidationResult(valid=not errors, errors=errors)

    def ensure_valid(self, cards: Optional[Sequence[ClozeCard]]) -> None:
        """Raise ValidationError unless every card passes."""
        result = self.validate(cards)
        if not result.valid:
            raise ValidationError(result.errors)


def has_cloze_marker(text: str) -> bool:
    # The single-brace form is accepted because models sometimes emit it
    return any(opening in text for opening in CLOZE_OPENINGS)


def validate_cards(cards: Optional[Sequence[ClozeCard]]) -> ValidationResult:
    """Convenience wrapper around CardValidator.validate."""
    return CardValidator().validate(cards)
