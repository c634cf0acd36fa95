"""Command-line interface for pdf2cloze."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from .build import write_package
from .config import Config, load_config
from .io import load_cards, load_facts, preview_cards, preview_facts, save_cards, save_facts
from .pipeline import StudyDeckPipeline
from .validate import CardValidator

app = typer.Typer(
    name="pdf2cloze",
    help="Turn a PDF into a cloze-deletion flashcard deck using an LLM",
    add_completion=False,
)
console = Console()


def _setup(config_path: Optional[Path], verbose: bool) -> Config:
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("pdf2cloze").setLevel(logging.DEBUG if verbose else logging.INFO)
    return load_config(config_path)


def _read_source_text(source: Path, pipeline: StudyDeckPipeline) -> str:
    if source.suffix.lower() == ".pdf":
        return pipeline.extract_text(source)
    return source.read_text(encoding="utf-8")


@app.command()
def init(
    target_dir: Path = typer.Argument(Path("."), help="Target directory for initialization"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing files"),
) -> None:
    """Write an example configuration file."""
    console.print("🚀 Initializing pdf2cloze project...", style="bold blue")

    target_dir.mkdir(parents=True, exist_ok=True)
    config_path = target_dir / "config.example.yaml"

    if config_path.exists() and not force:
        console.print(f"⚠️  {config_path} already exists. Use --force to overwrite.")
        return

    Config().to_yaml(config_path)
    console.print(Panel.fit(
        f"✅ Created example configuration: {config_path}\n\n"
        "Next steps:\n"
        "1. Export OPENROUTER_API_KEY\n"
        "2. Run: pdf2cloze extract document.pdf\n"
        "3. Review workspace/facts.json, then run: pdf2cloze cards\n"
        "4. Review workspace/cards.json, then run: pdf2cloze build",
        title="Success",
        style="green"
    ))


@app.command()
def extract(
    source: Path = typer.Argument(..., help="PDF or plain text file"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
    output_path: Optional[Path] = typer.Option(None, "--output", "-o", help="Facts JSON path (overrides config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Extract high-yield facts from a document."""
    console.print("🔍 Extracting facts...", style="bold blue")

    try:
        config = _setup(config_path, verbose)
        output_path = output_path or config.output.facts_path
        pipeline = StudyDeckPipeline(config)

        facts = pipeline.extract_facts(_read_source_text(source, pipeline))
        save_facts(facts, output_path)

        preview_facts(facts, console)
        console.print(f"✅ Saved {len(facts)} facts to {output_path}", style="green")

    except Exception as e:
        console.print(f"❌ Error during extraction: {e}", style="bold red", markup=False)
        raise typer.Exit(code=1)


@app.command()
def cards(
    facts_path: Optional[Path] = typer.Option(None, "--facts", help="Facts JSON path (overrides config)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
    output_path: Optional[Path] = typer.Option(None, "--output", "-o", help="Cards JSON path (overrides config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Generate cloze cards from a facts file."""
    console.print("🃏 Generating cloze cards...", style="bold blue")

    try:
        config = _setup(config_path, verbose)
        facts_path = facts_path or config.output.facts_path
        output_path = output_path or config.output.cards_path

        generated = StudyDeckPipeline(config).generate_cards(load_facts(facts_path))
        save_cards(generated, output_path)

        preview_cards(generated, console)
        console.print(f"✅ Saved {len(generated)} cards to {output_path}", style="green")

    except Exception as e:
        console.print(f"❌ Error during card generation: {e}", style="bold red", markup=False)
        raise typer.Exit(code=1)


@app.command()
def validate(
    cards_path: Optional[Path] = typer.Option(None, "--cards", help="Cards JSON file to validate (overrides config)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
) -> None:
    """Check cards for cloze markers and answers."""
    console.print("🔍 Validating cards...", style="bold blue")

    try:
        config = _setup(config_path, False)
        loaded = load_cards(cards_path or config.output.cards_path)
    except Exception as e:
        console.print(f"❌ Error during validation: {e}", style="bold red", markup=False)
        raise typer.Exit(code=1)

    result = CardValidator().validate(loaded)
    if result.valid:
        console.print(Panel.fit(
            f"✅ Validation successful!\n\nTotal cards: {len(loaded)}",
            title="Valid",
            style="green"
        ))
    else:
        console.print("❌ Validation failed:", style="bold red")
        for error in result.errors:
            console.print(f"  • {error}", style="red", markup=False)
        raise typer.Exit(code=1)


@app.command()
def build(
    cards_path: Optional[Path] = typer.Option(None, "--cards", help="Cards JSON path (overrides config)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
    output_path: Optional[Path] = typer.Option(None, "--output", "-o", help="Output .apkg path (overrides config)"),
    deck_name: Optional[str] = typer.Option(None, "--deck-name", help="Deck name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Package a cards file into a deck archive."""
    console.print("🔨 Building deck...", style="bold blue")

    try:
        config = _setup(config_path, verbose)
        cards_path = cards_path or config.output.cards_path
        output_path = output_path or config.output.apkg_path

        result = write_package(load_cards(cards_path), output_path, deck_name=deck_name, config=config.deck)

        console.print(Panel.fit(
            f"✅ Deck built successfully!\n\n"
            f"Output: {result['apkg_path']}\n"
            f"Cards: {result['total_cards']}\n"
            f"Deck: {result['deck_name']}",
            title="Success",
            style="green"
        ))

    except Exception as e:
        console.print(f"❌ Error during build: {e}", style="bold red", markup=False)
        raise typer.Exit(code=1)


@app.command()
def run(
    pdf_path: Path = typer.Argument(..., help="PDF to convert"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
    output_path: Optional[Path] = typer.Option(None, "--output", "-o", help="Output .apkg path (overrides config)"),
    deck_name: Optional[str] = typer.Option(None, "--deck-name", help="Deck name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Run extraction, card generation and packaging without review stops."""
    console.print("⚡ Running full pipeline...", style="bold blue")

    try:
        config = _setup(config_path, verbose)
        output_path = output_path or config.output.apkg_path

        result = StudyDeckPipeline(config).run(pdf_path, output_path, deck_name=deck_name)

        console.print(Panel.fit(
            f"✅ Deck built successfully!\n\n"
            f"Facts: {len(result['facts'])}\n"
            f"Cards: {len(result['cards'])}\n"
            f"Output: {result['apkg_path']}",
            title="Success",
            style="green"
        ))

    except Exception as e:
        console.print(f"❌ Error during pipeline run: {e}", style="bold red", markup=False)
        raise typer.Exit(code=1)


@app.command()
def preview(
    cards_path: Optional[Path] = typer.Option(None, "--cards", help="Cards JSON file to preview (overrides config)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
    n: int = typer.Option(10, "--n", help="Number of cards to preview"),
) -> None:
    """Preview cards from a cards file."""
    try:
        config = _setup(config_path, False)
        preview_cards(load_cards(cards_path or config.output.cards_path), console, max_cards=n)
    except Exception as e:
        console.print(f"❌ Error during preview: {e}", style="bold red", markup=False)
        raise typer.Exit(code=1)


@app.command()
def serve(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (overrides config)"),
    port: Optional[int] = typer.Option(None, "--port", help="Port (overrides config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Serve the HTTP API."""
    import uvicorn

    from .api import create_app

    config = _setup(config_path, verbose)
    console.print(f"🌐 Serving on http://{host or config.server.host}:{port or config.server.port}", style="bold blue")
    uvicorn.run(create_app(config), host=host or config.server.host, port=port or config.server.port)


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    console.print(f"pdf2cloze version {__version__}")


if __name__ == "__main__":
    app()
