"""HTTP endpoints for the three pipeline stages."""

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from . import __version__
from .build import APKG_MIME_TYPE
from .config import Config
from .llm import RemoteServiceError
from .models import ClozeCard, Fact
from .pipeline import StudyDeckPipeline
from .validate import InputError, ValidationError

logger = logging.getLogger(__name__)

REMOTE_ERROR_PREFIXES = {
    "/api/extract-points": "LLM processing error",
    "/api/generate-cards": "Card generation error",
}


class ExtractPointsRequest(BaseModel):
    pdfText: Optional[str] = None


class ExtractPointsResponse(BaseModel):
    points: List[Fact]


class GenerateCardsRequest(BaseModel):
    points: List[Fact] = Field(default_factory=list)


class GenerateCardsResponse(BaseModel):
    cards: List[ClozeCard]


class SubmittedCard(BaseModel):
    """A card as sent by a client. Missing fields are left to the validator."""
    id: str = ""
    front: str = ""
    back: str = ""

    def to_card(self) -> ClozeCard:
        return ClozeCard(id=self.id, front=self.front, back=self.back)


class GenerateAnkiRequest(BaseModel):
    cards: List[SubmittedCard] = Field(default_factory=list)
    deckName: Optional[str] = None


def get_pipeline(request: Request) -> StudyDeckPipeline:
    return request.app.state.pipeline


def create_app(config: Optional[Config] = None, pipeline: Optional[StudyDeckPipeline] = None) -> FastAPI:
    """Build the FastAPI application around one shared pipeline."""
    config = config or Config()

    app = FastAPI(
        title="pdf2cloze API",
        description="Extract facts from PDF text, turn them into cloze cards and package a deck",
        version=__version__,
    )
    app.state.config = config
    app.state.pipeline = pipeline or StudyDeckPipeline(config)

    @app.exception_handler(InputError)
    async def input_error_handler(request: Request, exc: InputError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RemoteServiceError)
    async def remote_error_handler(request: Request, exc: RemoteServiceError):
        prefix = REMOTE_ERROR_PREFIXES.get(request.url.path, "LLM processing error")
        logger.error(f"{prefix} on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": f"{prefix}: {exc}", "upstream_status": exc.status_code},
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.error(f"Deck generation rejected: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": f"ANKI generation error: {exc}", "errors": exc.errors},
        )

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.post("/api/extract-points", response_model=ExtractPointsResponse)
    def extract_points(body: ExtractPointsRequest, pipeline: StudyDeckPipeline = Depends(get_pipeline)):
        """Extract high-yield facts from document text."""
        if not body.pdfText:
            raise InputError("PDF text is required")

        logger.info(f"/api/extract-points - Received PDF text of {len(body.pdfText)} characters")
        points = pipeline.extract_facts(body.pdfText)
        logger.info(f"Successfully extracted {len(points)} points")
        return ExtractPointsResponse(points=points)

    @app.post("/api/generate-cards", response_model=GenerateCardsResponse)
    def generate_cards(body: GenerateCardsRequest, pipeline: StudyDeckPipeline = Depends(get_pipeline)):
        """Convert facts into cloze cards."""
        if not body.points:
            raise InputError("High-yield points are required")

        logger.info(f"/api/generate-cards - Processing {len(body.points)} points")
        cards = pipeline.generate_cards(body.points)
        logger.info(f"Successfully generated {len(cards)} cards")
        return GenerateCardsResponse(cards=cards)

    @app.post("/api/generate-anki")
    def generate_anki(body: GenerateAnkiRequest, pipeline: StudyDeckPipeline = Depends(get_pipeline)):
        """Package cards into a downloadable deck archive."""
        if not body.cards:
            raise InputError("Cards are required")

        logger.info(f"/api/generate-anki - Generating package for {len(body.cards)} cards")
        cards = [card.to_card() for card in body.cards]
        data = pipeline.package(cards, deck_name=body.deckName)

        filename = app.state.config.output.apkg_filename
        return Response(
            content=data,
            media_type=APKG_MIME_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app
