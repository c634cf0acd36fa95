"""Tests for prompt templates."""

import pytest

from pdf2cloze.models import Fact
from pdf2cloze.prompts import create_prompt_manager, get_default_system_prompt


@pytest.fixture
def prompt_manager():
    return create_prompt_manager()


def test_bundled_templates(prompt_manager):
    assert prompt_manager.list_templates() == ["extract_facts.j2", "generate_cards.j2"]


def test_extract_prompt_embeds_text(prompt_manager):
    """Test that the full document text is embedded after the rules."""
    prompt = prompt_manager.render_template("extract_facts.j2", text="The document body.", max_facts=15)

    assert "Concise (1-2 sentences maximum)" in prompt
    assert "Return a numbered list with ONLY the facts" in prompt
    assert prompt.rstrip().endswith("TEXT:\nThe document body.")


def test_cards_prompt_keeps_cloze_syntax(prompt_manager):
    """Test that cloze markers in the instructions survive rendering."""
    facts = [Fact(id="0", text="First fact."), Fact(id="4", text="Second fact.")]

    prompt = prompt_manager.render_template("generate_cards.j2", facts=facts)

    assert '{"front": "The capital of France is {{c1::Paris}}"' in prompt
    assert "Use Anki format: {{c1::text}} (double braces)" in prompt
    assert "1. First fact.\n2. Second fact." in prompt
    assert "Return ONLY the JSON array, no other text" in prompt


def test_missing_variable_raises(prompt_manager):
    """Test that templates fail loudly on missing variables."""
    from jinja2 import UndefinedError

    with pytest.raises(UndefinedError):
        prompt_manager.render_template("extract_facts.j2", max_facts=15)


def test_system_prompts():
    assert "15 most important facts" in get_default_system_prompt("extract_facts")
    assert "{{c1::answer}}" in get_default_system_prompt("generate_cards")
