"""Tests for card validation."""

import pytest

from pdf2cloze.models import ClozeCard
from pdf2cloze.validate import CardValidator, ValidationError, validate_cards

MARKER_ERROR = "Missing cloze deletion marker ({{c1::text}} format)"


def _card(front="The capital of France is {{c1::Paris}}", back="Paris is the capital of France.", id="0"):
    return ClozeCard(id=id, front=front, back=back)


def test_valid_cards():
    """Test that well-formed cards pass."""
    result = validate_cards([_card(), _card(front="{{c1::Mitochondria}} make ATP", id="1")])

    assert result.valid
    assert result.errors == []


@pytest.mark.parametrize("cards", [[], None])
def test_no_cards(cards):
    """Test that an empty list is a single error."""
    result = CardValidator().validate(cards)

    assert result.valid is False
    assert result.errors == ["No cards provided"]


def test_missing_marker_reports_one_based_position():
    """Test that a card without a cloze marker is reported by position."""
    result = validate_cards([_card(), _card(front="The capital of France is Paris")])

    assert not result.valid
    assert result.errors == [f"Card 2: {MARKER_ERROR}"]


def test_single_brace_marker_accepted():
    """Test that the degenerate single-brace marker passes."""
    result = validate_cards([_card(front="The capital of France is {c1::Paris}")])

    assert result.valid


@pytest.mark.parametrize("back", ["", "   ", "\n\t"])
def test_blank_answer(back):
    """Test that whitespace-only answers fail."""
    result = validate_cards([_card(back=back)])

    assert result.errors == ["Card 1: Missing explanation/answer"]


def test_errors_are_collected_in_card_order():
    """Test that every problem on every card is listed."""
    result = validate_cards([
        _card(front="no marker", back=" "),
        _card(),
        _card(front=""),
    ])

    assert result.errors == [
        f"Card 1: {MARKER_ERROR}",
        "Card 1: Missing explanation/answer",
        f"Card 3: {MARKER_ERROR}",
    ]


def test_ensure_valid_raises_aggregated_error():
    """Test that ensure_valid carries the full error list."""
    with pytest.raises(ValidationError) as exc_info:
        CardValidator().ensure_valid([_card(front="plain"), _card(back="")])

    error = exc_info.value
    assert error.errors == [f"Card 1: {MARKER_ERROR}", "Card 2: Missing explanation/answer"]
    assert str(error) == (
        f"Card validation failed: Card 1: {MARKER_ERROR}, Card 2: Missing explanation/answer"
    )


def test_ensure_valid_passes_silently():
    """Test that valid cards raise nothing."""
    CardValidator().ensure_valid([_card()])
