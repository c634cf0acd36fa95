"""Tests for configuration management."""

import os
import tempfile
from pathlib import Path

import pydantic
import pytest
import yaml

from pdf2cloze.config import Config, DeckConfig, LLMConfig, load_config


def test_default_config():
    """Test that default configuration loads successfully."""
    config = Config()

    assert config.project.name == "pdf2cloze"
    assert config.llm.provider.value == "openrouter"
    assert config.llm.model == "openai/gpt-4.1-mini"
    assert config.llm.temperature == 0.7
    assert config.llm.max_tokens == 2000
    assert config.llm.max_retries == 0
    assert config.extraction.max_facts == 15
    assert config.deck.deck_id == 1684567890
    assert config.deck.model_id == 1684567891
    assert config.deck.deck_name == "PDF Study Deck"
    assert config.output.apkg_path == Path("workspace/study_deck.apkg")


def test_config_from_yaml():
    """Test loading configuration from YAML file."""
    config_data = {
        "project": {"name": "Test Project", "author": "Test Author"},
        "llm": {"model": "openai/gpt-4.1", "temperature": 0.2},
        "deck": {"deck_name": "Biology"},
    }

    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.dump(config_data, f)
        yaml_path = f.name

    try:
        config = Config.from_yaml(yaml_path)

        assert config.project.author == "Test Author"
        assert config.llm.model == "openai/gpt-4.1"
        assert config.llm.temperature == 0.2
        assert config.deck.deck_name == "Biology"
        # Untouched sections keep their defaults
        assert config.deck.deck_id == 1684567890

    finally:
        os.unlink(yaml_path)


def test_config_to_yaml_keeps_api_key_placeholder(monkeypatch, tmp_path):
    """Test that saving never writes a resolved API key."""
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-secret")
    config = Config()
    assert config.llm.api_key == "sk-secret"

    yaml_path = tmp_path / "config.yaml"
    config.to_yaml(yaml_path)

    with open(yaml_path, 'r') as f:
        data = yaml.safe_load(f)

    assert data["llm"]["api_key"] == "${OPENROUTER_API_KEY}"
    assert data["output"]["workspace"] == "workspace"
    assert "sk-secret" not in yaml_path.read_text()


def test_env_var_substitution(monkeypatch):
    """Test environment variable substitution in API key."""
    monkeypatch.setenv("TEST_API_KEY", "test-api-key-12345")

    config = LLMConfig(api_key="${TEST_API_KEY}")
    assert config.api_key == "test-api-key-12345"


def test_yaml_round_trip(monkeypatch, tmp_path):
    """Test that a saved config loads back with the same values."""
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-round-trip")
    config = Config()
    config.llm.timeout = 30

    yaml_path = tmp_path / "config.yaml"
    config.to_yaml(yaml_path)
    loaded = Config.from_yaml(yaml_path)

    assert loaded.llm.timeout == 30
    assert loaded.llm.api_key == "sk-round-trip"
    assert loaded.deck == config.deck


def test_nested_env_override(monkeypatch):
    """Test nested settings from environment variables."""
    monkeypatch.setenv("PDF2CLOZE_LLM__MODEL", "openai/gpt-4.1")

    config = Config()
    assert config.llm.model == "openai/gpt-4.1"


def test_deck_config_is_immutable():
    """Test that deck identity cannot be changed after construction."""
    deck = DeckConfig()

    with pytest.raises(pydantic.ValidationError):
        deck.deck_id = 1

    with pytest.raises(pydantic.ValidationError):
        deck.scheduling.reviews_per_day = 50


def test_load_config_missing_path_returns_defaults(tmp_path):
    """Test that a missing config path falls back to defaults."""
    config = load_config(tmp_path / "missing.yaml")
    assert config.llm.model == "openai/gpt-4.1-mini"


def test_workspace_creation(tmp_path):
    """Test workspace directory creation."""
    config = Config()
    config.output.workspace = tmp_path / "test_workspace"

    assert not config.output.workspace.exists()
    config.create_workspace()
    assert config.output.workspace.exists()
