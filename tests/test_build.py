"""Tests for deck packaging."""

import io
import json
import zipfile

import pytest

from pdf2cloze.build import (
    APKG_MIME_TYPE,
    DeckPackager,
    build_deck_package,
    write_package,
)
from pdf2cloze.config import DeckConfig
from pdf2cloze.models import ClozeCard
from pdf2cloze.validate import ValidationError


@pytest.fixture
def france_card():
    return ClozeCard(
        id="0",
        front="The capital of France is {{c1::Paris}}",
        back="Paris is the capital of France.",
    )


@pytest.fixture
def sample_cards(france_card):
    return [
        france_card,
        ClozeCard(id="1", front="{{c1::Mitochondria}} produce ATP.", back="The cell's powerhouse."),
        ClozeCard(id="2", front="Water boils at {{c1::100}} °C at sea level.", back="At 1 atm."),
    ]


def _open(data):
    archive = zipfile.ZipFile(io.BytesIO(data))
    return {name: archive.read(name).decode("utf-8") for name in archive.namelist()}


def test_france_example(france_card):
    """Test the single-card example end to end."""
    members = _open(build_deck_package([france_card]))

    assert sorted(members) == ["collection.json", "media", "notes.json"]

    notes = json.loads(members["notes.json"])["notes"]
    assert len(notes) == 1
    assert notes[0]["flds"] == "The capital of France is {{c1::Paris}}\x1fParis is the capital of France."
    assert notes[0]["sfld"] == "The capital of France is {{c1::Paris}}"

    collection = json.loads(members["collection.json"])
    assert collection["decks"]["1"]["name"] == "PDF Study Deck"


def test_archive_is_deflated(sample_cards):
    """Test that members are compressed."""
    archive = zipfile.ZipFile(io.BytesIO(build_deck_package(sample_cards)))

    assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in archive.infolist())


def test_one_note_per_card(sample_cards):
    """Test that notes.json mirrors the input cards in order."""
    notes = json.loads(_open(build_deck_package(sample_cards))["notes.json"])["notes"]

    assert [note["sfld"] for note in notes] == [card.front for card in sample_cards]


def test_note_ids_are_deterministic(sample_cards):
    """Test that ids and guids depend only on deck id and position."""
    packager = DeckPackager()

    first = json.loads(_open(packager.package(sample_cards, now=1000))["notes.json"])["notes"]
    second = json.loads(_open(packager.package(sample_cards, now=2000))["notes.json"])["notes"]

    assert [note["id"] for note in first] == [1684567891, 1684567892, 1684567893]
    assert [note["guid"] for note in first] == [
        "pdf-anki-1684567891",
        "pdf-anki-1684567892",
        "pdf-anki-1684567893",
    ]
    assert [note["id"] for note in first] == [note["id"] for note in second]
    assert [note["guid"] for note in first] == [note["guid"] for note in second]
    assert first[0]["mod"] == 1000
    assert second[0]["mod"] == 2000


def test_notes_are_unscheduled(france_card):
    """Test that every scheduling field starts at zero."""
    note = DeckPackager().build_notes([france_card], now=1)[0]

    for field in ("type", "queue", "due", "ivl", "factor", "reps", "lapses", "left", "odue", "odid"):
        assert note[field] == 0
    assert note["mid"] == 1684567891
    assert note["did"] == 1684567890
    assert note["tags"] == "pdf-to-anki"
    assert note["usn"] == -1


def test_collection_record(france_card):
    """Test the deck, deck options, model and metadata tuple."""
    collection = json.loads(_open(DeckPackager().package([france_card], now=1700000000))["collection.json"])

    deck = collection["decks"]["1"]
    assert deck["id"] == 1684567890
    assert deck["mod"] == 1700000000
    assert deck["conf"] == 1

    options = collection["dconf"]["1"]
    assert options["new"]["delays"] == [1, 10]
    assert options["new"]["initialFactor"] == 2500
    assert options["lapse"]["leechFails"] == 8
    assert options["rev"]["perDay"] == 200
    assert options["rev"]["ease4"] == 1.3

    model = collection["models"]["1"]
    assert model["id"] == 1684567891
    assert model["name"] == "Cloze with Explanation"
    assert model["type"] == 1
    assert [field["name"] for field in model["flds"]] == ["Text", "Extra"]
    assert model["tmpls"][0]["qfmt"] == "{{cloze:Text}}"
    assert model["tmpls"][0]["afmt"] == '{{cloze:Text}}<br><br><div class="extra">{{Extra}}</div>'
    assert ".cloze" in model["css"]

    assert collection["col"] == [1700000000, 0, 0, 11, ""]


def test_media_manifest_is_empty(france_card):
    """Test that the media member is an empty JSON object."""
    assert json.loads(_open(build_deck_package([france_card]))["media"]) == {}


def test_custom_deck_name(france_card):
    """Test that an explicit deck name replaces the default."""
    collection = json.loads(_open(build_deck_package([france_card], deck_name="Geography"))["collection.json"])

    assert collection["decks"]["1"]["name"] == "Geography"


def test_custom_deck_config(france_card):
    """Test that identity comes from the injected configuration."""
    config = DeckConfig(deck_id=100, model_id=200, guid_prefix="geo", serializer_version=12)
    members = _open(DeckPackager(config).package([france_card], now=5))

    note = json.loads(members["notes.json"])["notes"][0]
    assert note["id"] == 101
    assert note["guid"] == "geo-101"
    assert note["mid"] == 200
    assert json.loads(members["collection.json"])["col"] == [5, 0, 0, 12, ""]


def test_empty_cards_rejected():
    """Test that packaging refuses an empty card list."""
    with pytest.raises(ValidationError) as exc_info:
        DeckPackager().package([])

    assert exc_info.value.errors == ["No cards provided"]


def test_invalid_cards_rejected(france_card):
    """Test that a bad card stops packaging with every error listed."""
    bad = ClozeCard(id="1", front="No marker here", back="")

    with pytest.raises(ValidationError) as exc_info:
        DeckPackager().package([france_card, bad])

    assert exc_info.value.errors == [
        "Card 2: Missing cloze deletion marker ({{c1::text}} format)",
        "Card 2: Missing explanation/answer",
    ]


def test_write_package(tmp_path, sample_cards):
    """Test writing the archive to disk."""
    output_path = tmp_path / "out" / "study_deck.apkg"

    result = write_package(sample_cards, output_path, deck_name="Science")

    assert output_path.exists()
    assert result["total_cards"] == 3
    assert result["deck_name"] == "Science"
    assert zipfile.is_zipfile(output_path)


def test_mime_type():
    assert APKG_MIME_TYPE == "application/octet-stream"
