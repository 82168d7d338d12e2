import asyncio
import sys
from datetime import UTC, datetime
from pathlib import Path

import typer
from dotenv import load_dotenv

from interview_prep.core.config import GenerationConfig, parse_model_id
from interview_prep.core.logging import init_logging, log_event, set_run_id, set_trace_id
from interview_prep.providers.adapter import GenerationAdapter, build_adapter
from interview_prep.providers.exceptions import ProviderError

app = typer.Typer(help="InterviewPrep - generate interview practice questions from a job posting.")


def _init_logging_from_cli(
    log_level: str | None = None,
    log_file: str | None = None,
    log_format: str = "text",
    log_mask: bool = False,
) -> None:
    # Logs go to stderr so stdout stays clean for the questions themselves
    init_logging(level=log_level or "WARNING", fmt=log_format, file_path=log_file, mask=log_mask, use_stderr=True)
    run_id = datetime.now(UTC).strftime("%Y%m%d%H%M%S%f")[-12:]
    set_run_id(run_id)
    set_trace_id(run_id)
    log_event("cli.start", component="cli", operation="start", log_format=log_format, log_mask=log_mask)


def _build_adapter(model: str | None) -> GenerationAdapter:
    load_dotenv()
    config = GenerationConfig.from_env()
    if model:
        vendor, model_name = parse_model_id(model)
        if vendor != config.vendor:
            raise typer.BadParameter(f"MODEL_ID selects '{config.vendor}', cannot switch vendor to '{vendor}' here")
        config = config.model_copy(update={"model": model_name})
    return build_adapter(config)


def _read_posting(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise typer.BadParameter(f"File not found: {source}")
    return path.read_text(encoding="utf-8")


@app.command()
def generate(
    source: str = typer.Argument(..., help="Path to a job posting text file, or '-' for stdin"),
    model: str | None = typer.Option(None, help="Provider:model identifier (defaults to MODEL_ID)"),
    log_level: str | None = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
    log_file: str | None = typer.Option(None, help="Log file path (default stderr)"),
    log_format: str = typer.Option("text", help="Log format: json|text"),
    log_mask: bool = typer.Option(False, help="Mask job posting text in logs"),
):
    """Print five interview questions generated from a job posting."""
    _init_logging_from_cli(log_level, log_file, log_format, log_mask)
    adapter = _build_adapter(model)
    posting = _read_posting(source)

    try:
        questions = asyncio.run(adapter.generate_questions(posting))
    except ProviderError as e:
        typer.echo(f"Generation failed [{e.code.value}]: {e.message}", err=True)
        raise typer.Exit(code=1)

    if adapter.is_demo_mode:
        typer.echo("(demo mode: no API key configured)", err=True)
    for index, question in enumerate(questions, start=1):
        typer.echo(f"{index}. {question.text}")


@app.command("detect-language")
def detect_language(
    text: str = typer.Argument(..., help="Text to classify"),
    model: str | None = typer.Option(None, help="Provider:model identifier (defaults to MODEL_ID)"),
    log_level: str | None = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
):
    """Print the detected language code (en, pl or de)."""
    _init_logging_from_cli(log_level)
    adapter = _build_adapter(model)
    typer.echo(asyncio.run(adapter.detect_language(text)).value)


@app.command("cache-stats")
def cache_stats(
    source: str = typer.Argument(..., help="Path to a job posting text file, or '-' for stdin"),
    log_level: str | None = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
):
    """Generate twice from the same posting and report how the response cache behaved."""
    _init_logging_from_cli(log_level)
    adapter = _build_adapter(None)
    posting = _read_posting(source)

    async def _run() -> None:
        await adapter.generate_questions(posting)
        await adapter.generate_questions(posting)

    try:
        asyncio.run(_run())
    except ProviderError as e:
        typer.echo(f"Generation failed [{e.code.value}]: {e.message}", err=True)
        raise typer.Exit(code=1)

    stats = adapter.cache_stats()
    typer.echo(f"demo_mode={adapter.is_demo_mode} size={stats['size']} entries={stats['entries']}")


def main():
    app()


if __name__ == "__main__":
    main()
