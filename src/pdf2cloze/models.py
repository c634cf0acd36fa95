"""Data structures passed between the pipeline stages."""

from typing import List

from pydantic import AliasChoices, BaseModel, Field, computed_field


class Fact(BaseModel):
    """One standalone, learnable statement extracted from a document.

    ``id`` is the line position the fact was parsed from, so ids are not
    contiguous when lines were skipped. The web client sends the text as
    ``point``; both names are accepted on input.
    """

    id: str
    text: str = Field(validation_alias=AliasChoices("text", "point"))


class ClozeCard(BaseModel):
    """A cloze deletion card.

    ``explanation`` is a read-only view of ``back``. It is serialized so the
    wire shape stays ``{id, front, back, explanation}``, and any explanation
    sent by a client is ignored.
    """

    id: str
    front: str
    back: str

    @computed_field
    @property
    def explanation(self) -> str:
        return self.back


def facts_from_json(data: List[dict]) -> List[Fact]:
    return [Fact.model_validate(item) for item in data]


def cards_from_json(data: List[dict]) -> List[ClozeCard]:
    return [ClozeCard.model_validate(item) for item in data]
