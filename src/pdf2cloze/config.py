"""Configuration management using Pydantic."""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, validator
from pydantic_settings import BaseSettings


class ProviderType(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    OPENROUTER = "openrouter"


class ProjectConfig(BaseModel):
    """Project-level configuration."""
    name: str = "pdf2cloze"
    version: str = "1.0"
    author: Optional[str] = None
    description: Optional[str] = None


class LLMConfig(BaseModel):
    """Chat completion endpoint configuration."""
    provider: ProviderType = ProviderType.OPENROUTER
    model: str = "openai/gpt-4.1-mini"
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2000
    api_key: Optional[str] = Field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY"))
    timeout: int = 120
    max_retries: int = 0
    referer: str = "https://pdf-to-anki.vercel.app"
    title: str = "PDF-to-ANKI"

    @validator("api_key", pre=True)
    def resolve_api_key(cls, v):
        if v and v.startswith("${") and v.endswith("}"):
            env_var = v[2:-1]
            return os.getenv(env_var)
        return v


class ExtractionConfig(BaseModel):
    """Fact extraction limits."""
    max_facts: int = 15
    min_fact_length: int = 5


class SchedulingConfig(BaseModel):
    """Default deck options written into the collection record."""
    model_config = ConfigDict(frozen=True)

    new_delays: List[int] = Field(default_factory=lambda: [1, 10])
    new_intervals: List[int] = Field(default_factory=lambda: [1, 4, 7])
    initial_factor: int = 2500
    lapse_delays: List[int] = Field(default_factory=lambda: [10])
    lapse_mult: float = 0.5
    lapse_min_interval: int = 1
    leech_fails: int = 8
    reviews_per_day: int = 200
    ease4: float = 1.3
    review_mult: float = 1
    hard_penalty: float = 1.2


DEFAULT_CLOZE_CSS = """
.card {
  font-family: arial;
  font-size: 20px;
  text-align: center;
  color: black;
  background-color: white;
}
.extra {
  margin-top: 1.5em;
  font-size: 14px;
  color: #333;
  text-align: left;
  background-color: #f5f5f5;
  padding: 0.5em;
  border-radius: 4px;
}
.cloze {
  font-weight: bold;
  color: blue;
}
"""


class DeckConfig(BaseModel):
    """Fixed deck and note model identity used by the packager."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    deck_id: int = 1684567890
    model_id: int = 1684567891
    deck_name: str = "PDF Study Deck"
    deck_description: str = "PDF to ANKI generated deck"
    model_name: str = "Cloze with Explanation"
    guid_prefix: str = "pdf-anki"
    note_tags: str = "pdf-to-anki"
    css: str = DEFAULT_CLOZE_CSS
    schema_version: int = 0
    serializer_version: int = 11
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)


class OutputConfig(BaseModel):
    """Output paths configuration."""
    workspace: Path = Path("workspace")
    facts_path: Path = Path("workspace/facts.json")
    cards_path: Path = Path("workspace/cards.json")
    apkg_filename: str = "study_deck.apkg"

    @property
    def apkg_path(self) -> Path:
        return self.workspace / self.apkg_filename


class ServerConfig(BaseModel):
    """HTTP service configuration."""
    host: str = "127.0.0.1"
    port: int = 8000


class Config(BaseSettings):
    """Complete pdf2cloze configuration."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    deck: DeckConfig = Field(default_factory=DeckConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        env_prefix = "PDF2CLOZE_"
        extra = "ignore"

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Config":
        """Load configuration from YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file with proper scalar serialization."""
        data = self.model_dump(mode="json")
        # Keep the placeholder rather than writing a resolved secret to disk
        data["llm"]["api_key"] = "${OPENROUTER_API_KEY}"

        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, indent=2, sort_keys=False)

    def create_workspace(self) -> None:
        """Create workspace directories."""
        self.output.workspace.mkdir(parents=True, exist_ok=True)


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """Load configuration from YAML when a path is given, else defaults."""
    if path and Path(path).exists():
        return Config.from_yaml(path)
    return Config()
