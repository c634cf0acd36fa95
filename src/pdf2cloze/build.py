"""Deck packaging into a zip container.

The archive is a simplified stand-in for a real ``.apkg``: the target
application stores notes in an SQLite collection, while this package holds
the same records as JSON documents. It is not bit-compatible with the
native format.
"""

import io
import json
import logging
import time
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import DeckConfig
from .models import ClozeCard
from .validate import CardValidator

logger = logging.getLogger(__name__)

APKG_MIME_TYPE = "application/octet-stream"
FIELD_SEPARATOR = "\x1f"

COLLECTION_MEMBER = "collection.json"
MEDIA_MEMBER = "media"
NOTES_MEMBER = "notes.json"

MODEL_TYPE_CLOZE = 1

LATEX_PRE = (
    "\\documentclass[12pt]{article}\\usepackage[utf-8]{inputenc}"
    "\\usepackage{amssymb}\\pagestyle{empty}\\geometry{margin=1cm}"
    "\\usepackage{geometry}\\begin{document}"
)
LATEX_POST = "\\end{document}"


class DeckPackager:
    """Builds a deck archive from validated cloze cards."""

    def __init__(self, config: Optional[DeckConfig] = None, validator: Optional[CardValidator] = None):
        self.config = config or DeckConfig()
        self.validator = validator or CardValidator()

    def package(
        self,
        cards: Sequence[ClozeCard],
        deck_name: Optional[str] = None,
        now: Optional[int] = None,
    ) -> bytes:
        """Validate the cards and return the archive bytes.

        Raises ValidationError before any bytes are produced if a card fails.
        """
        self.validator.ensure_valid(cards)

        deck_name = deck_name or self.config.deck_name
        now = int(time.time()) if now is None else now

        logger.info(f"Starting deck generation for {len(cards)} cards")

        notes = self.build_notes(cards, now)
        collection = self.build_collection(deck_name, now)

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(COLLECTION_MEMBER, json.dumps(collection))
            archive.writestr(MEDIA_MEMBER, json.dumps({}))
            archive.writestr(NOTES_MEMBER, json.dumps({"notes": notes}))

        logger.info(f"Created deck '{deck_name}' with {len(notes)} notes")
        return buffer.getvalue()

    def build_notes(self, cards: Sequence[ClozeCard], now: int) -> List[Dict[str, Any]]:
        """Create one unscheduled note record per card."""
        notes = []
        for position, card in enumerate(cards):
            note_id = self.config.deck_id + position + 1
            notes.append({
                "id": note_id,
                "guid": f"{self.config.guid_prefix}-{note_id}",
                "mid": self.config.model_id,
                "did": self.config.deck_id,
                "mod": now,
                "usn": -1,
                "tags": self.config.note_tags,
                "flds": f"{card.front}{FIELD_SEPARATOR}{card.back}",
                "sfld": card.front,
                "csum": 0,
                "flags": 0,
                "data": "",
                # New cards: every scheduling counter starts at zero
                "type": 0,
                "queue": 0,
                "due": 0,
                "ivl": 0,
                "factor": 0,
                "reps": 0,
                "lapses": 0,
                "left": 0,
                "odue": 0,
                "odid": 0,
                "omod": 0,
            })
        return notes

    def build_collection(self, deck_name: str, now: int) -> Dict[str, Any]:
        """Create the collection record holding deck, options, model and metadata."""
        return {
            "decks": {"1": self._deck_record(deck_name, now)},
            "dconf": {"1": self._deck_options(now)},
            "models": {"1": self._model_record(now)},
            "col": [now, 0, self.config.schema_version, self.config.serializer_version, ""],
        }

    def _deck_record(self, deck_name: str, now: int) -> Dict[str, Any]:
        return {
            "id": self.config.deck_id,
            "mod": now,
            "name": deck_name,
            "usn": -1,
            "lrnToday": [0, 0],
            "revToday": [0, 0],
            "newToday": [0, 0],
            "timeToday": [0, 0],
            "collapsed": False,
            "browserCollapsed": False,
            "lastSaved": now,
            "desc": self.config.deck_description,
            "dyn": False,
            "conf": 1,
            "extendNew": 0,
            "extendRev": 0,
        }

    def _deck_options(self, now: int) -> Dict[str, Any]:
        scheduling = self.config.scheduling
        return {
            "name": "Default",
            "new": {
                "delays": list(scheduling.new_delays),
                "ints": list(scheduling.new_intervals),
                "initialFactor": scheduling.initial_factor,
                "separate": True,
            },
            "lapse": {
                "delays": list(scheduling.lapse_delays),
                "mult": scheduling.lapse_mult,
                "minInt": scheduling.lapse_min_interval,
                "leechFails": scheduling.leech_fails,
            },
            "rev": {
                "perDay": scheduling.reviews_per_day,
                "ease4": scheduling.ease4,
                "mult": scheduling.review_mult,
                "hardPenalty": scheduling.hard_penalty,
            },
            "timer": 0,
            "autoplay": True,
            "replayq": True,
            "mod": now,
            "id": 1,
            "usn": 0,
        }

    def _model_record(self, now: int) -> Dict[str, Any]:
        field_defaults = {"sticky": False, "rtl": False, "font": "Arial", "media": [], "size": 20}
        return {
            "id": self.config.model_id,
            "name": self.config.model_name,
            "type": MODEL_TYPE_CLOZE,
            "did": self.config.deck_id,
            "mod": now,
            "usn": -1,
            "sortf": 0,
            "latexPre": LATEX_PRE,
            "latexPost": LATEX_POST,
            "latexsvg": False,
            "req": [[0, "any", [0]]],
            "flds": [
                {"name": "Text", "ord": 0, **field_defaults},
                {"name": "Extra", "ord": 1, **field_defaults},
            ],
            "tmpls": [
                {
                    "name": "Cloze",
                    "ord": 0,
                    "qfmt": "{{cloze:Text}}",
                    "afmt": '{{cloze:Text}}<br><br><div class="extra">{{Extra}}</div>',
                    "did": None,
                    "bafmt": "",
                    "bqfmt": "",
                },
            ],
            "css": self.config.css,
        }


def build_deck_package(
    cards: Sequence[ClozeCard],
    deck_name: Optional[str] = None,
    config: Optional[DeckConfig] = None,
) -> bytes:
    """Package cards with a fresh DeckPackager."""
    return DeckPackager(config).package(cards, deck_name=deck_name)


def write_package(
    cards: Sequence[ClozeCard],
    output_path: Path,
    deck_name: Optional[str] = None,
    config: Optional[DeckConfig] = None,
) -> Dict[str, Any]:
    """Package cards and write the archive to ``output_path``."""
    data = build_deck_package(cards, deck_name=deck_name, config=config)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)

    logger.info(f"Wrote deck package to {output_path}")

    return {
        "apkg_path": output_path,
        "total_cards": len(cards),
        "deck_name": deck_name or (config or DeckConfig()).deck_name,
        "size_bytes": len(data),
    }
