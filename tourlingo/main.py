"""Command-line entry point for the tour relay."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.traceback import install as install_rich_traceback

from .config import Config
from .errors import ConfigurationError, TourLingoError
from .filtering import NoiseFilter
from .languages import LANGUAGE_CODES, active_languages, is_supported, language_name
from .pipeline import PipelineOptions, TranslationPipeline, render_announcements
from .providers import ServiceFactory, estimate_tts_cost
from .room import RoomRelayServer

install_rich_traceback(suppress=[typer])

app = typer.Typer(help="Live multilingual relay for guided tours.")
console = Console()
logger = logging.getLogger(__name__)


def _setup(config_paths: Optional[List[Path]], dotenv_path: Optional[Path]) -> Config:
    load_dotenv(dotenv_path=dotenv_path)
    try:
        config = Config.load(config_paths)
    except ConfigurationError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=2) from exc
    logging.basicConfig(
        level=config.system.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return config


async def _run_translate(
    config: Config,
    audio: bytes,
    source: str,
    targets: List[str],
    options: PipelineOptions,
    mock_transcript: Optional[str],
):
    if mock_transcript is not None:
        services = ServiceFactory.create_mock(mock_transcript)
    else:
        services = ServiceFactory.create(config)
    pipeline = TranslationPipeline(services.stt, services.translator, services.synthesizer)
    try:
        return await pipeline.process(audio, source, targets, options)
    finally:
        await services.close()


@app.command()
def translate(
    audio_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Recorded segment to translate."
    ),
    source: str = typer.Option("en", "--source", "-s", help="Language spoken in the segment."),
    target: List[str] = typer.Option(
        ["fr"], "--target", "-t", help="Target language. Provide multiple flags for multiple targets."
    ),
    no_audio: bool = typer.Option(False, "--no-audio", help="Translate text only, skip synthesis."),
    no_filter: bool = typer.Option(False, "--no-filter", help="Disable the noise filter."),
    quality: bool = typer.Option(False, "--quality", help="Use the higher-quality, slower voice model."),
    operator_voice: bool = typer.Option(False, "--operator-voice", help="Speak with the guide's cloned voice."),
    voice_style: str = typer.Option("narration", "--voice-style", help="narration, conversation or announcement."),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", file_okay=False, help="Where to write <stem>-<lang>.mp3 files."
    ),
    mock_transcript: Optional[str] = typer.Option(
        None, "--mock-transcript", help="Skip the remote services and pretend the segment said this."
    ),
    config_path: Optional[List[Path]] = typer.Option(
        None, "--config", "-c", help="YAML config file; may be repeated, later files win."
    ),
    dotenv_path: Optional[Path] = typer.Option(None, "--dotenv-path", help="Optional .env file with API keys."),
) -> None:
    """Run one recorded segment through transcription, filtering, translation and synthesis."""
    if not is_supported(source):
        raise typer.BadParameter(f"Unsupported source language {source!r}; choose from {', '.join(LANGUAGE_CODES)}.")
    targets = active_languages(target)
    if not targets:
        raise typer.BadParameter(f"No supported --target given; choose from {', '.join(LANGUAGE_CODES)}.")
    skipped = sorted(set(target) - set(targets))
    if skipped:
        console.print(f"[yellow]Skipping unsupported target language(s): {', '.join(skipped)}[/yellow]")

    config = _setup(config_path, dotenv_path)
    options = PipelineOptions(
        generate_audio=not no_audio,
        enable_noise_filter=not no_filter,
        use_operator_voice=operator_voice,
        fast_mode=not quality,
        voice_style=voice_style,
    )

    try:
        result = asyncio.run(
            _run_translate(config, audio_file.read_bytes(), source, targets, options, mock_transcript)
        )
    except TourLingoError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc

    console.print(f"[bold]Transcript:[/bold] {escape(result.original_text) or '(no speech)'}")
    if result.suppressed:
        console.print(f"[yellow]Segment filtered ({result.filter_reason.value}).[/yellow]")
        return
    if not result.has_speech:
        console.print("[yellow]No speech detected.[/yellow]")
        return
    if result.filtered_text is not None:
        console.print(f"[bold]Translated text:[/bold] {escape(result.text)}")

    table = Table(title=f"Translations ({result.processing_time_ms} ms)")
    table.add_column("Language")
    table.add_column("Text")
    table.add_column("Audio")
    out_dir = output_dir or audio_file.parent
    for language, output in result.translations.items():
        audio_note = "-"
        if output.audio:
            out_dir.mkdir(parents=True, exist_ok=True)
            out_path = out_dir / f"{audio_file.stem}-{language}.mp3"
            out_path.write_bytes(output.audio)
            audio_note = str(out_path)
        style = "red" if output.failed else "green"
        table.add_row(language_name(language), f"[{style}]{escape(output.text)}[/{style}]", audio_note)
    console.print(table)


async def _run_announce(
    config: Config,
    text: str,
    source: str,
    targets: List[str],
    use_operator_voice: bool,
    voice_style: str,
    mock: bool,
):
    services = ServiceFactory.create_mock(text) if mock else ServiceFactory.create(config)
    try:
        translated = await services.translator.translate_batch(text, source, targets)
        translations = {language: translated[language] for language in targets}
        audio = await render_announcements(
            services.synthesizer, translations, use_operator_voice=use_operator_voice, voice_style=voice_style
        )
    finally:
        await services.close()
    return translations, audio


@app.command()
def announce(
    text: str = typer.Argument(..., help="Announcement text in the source language."),
    source: str = typer.Option("en", "--source", "-s", help="Language the text is written in."),
    target: List[str] = typer.Option(
        ["fr"], "--target", "-t", help="Target language. Provide multiple flags for multiple targets."
    ),
    name: str = typer.Option("announcement", "--name", "-n", help="File stem for <name>-<lang>.mp3."),
    output_dir: Path = typer.Option(Path("."), "--output-dir", "-o", file_okay=False, help="Where to write audio."),
    operator_voice: bool = typer.Option(False, "--operator-voice", help="Speak with the guide's cloned voice."),
    voice_style: str = typer.Option("announcement", "--voice-style", help="narration, conversation or announcement."),
    mock: bool = typer.Option(False, "--mock", help="Skip the remote services."),
    config_path: Optional[List[Path]] = typer.Option(
        None, "--config", "-c", help="YAML config file; may be repeated, later files win."
    ),
    dotenv_path: Optional[Path] = typer.Option(None, "--dotenv-path", help="Optional .env file with API keys."),
) -> None:
    """Pre-render an announcement in every target language with the quality voice model."""
    if not is_supported(source):
        raise typer.BadParameter(f"Unsupported source language {source!r}; choose from {', '.join(LANGUAGE_CODES)}.")
    targets = active_languages(target)
    if not targets:
        raise typer.BadParameter(f"No supported --target given; choose from {', '.join(LANGUAGE_CODES)}.")

    config = _setup(config_path, dotenv_path)
    try:
        translations, audio = asyncio.run(
            _run_announce(config, text, source, targets, operator_voice, voice_style, mock)
        )
    except TourLingoError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc

    table = Table(title="Announcement")
    table.add_column("Language")
    table.add_column("Text")
    table.add_column("Audio")
    for language, translated in translations.items():
        audio_note = "[red]failed[/red]"
        if language in audio:
            output_dir.mkdir(parents=True, exist_ok=True)
            out_path = output_dir / f"{name}-{language}.mp3"
            out_path.write_bytes(audio[language])
            audio_note = str(out_path)
        table.add_row(language_name(language), escape(translated), audio_note)
    console.print(table)
    characters = sum(len(translations[language]) for language in audio)
    console.print(f"Estimated synthesis cost: ${estimate_tts_cost(characters):.4f} ({characters} characters)")


@app.command("filter")
def filter_text(text: str = typer.Argument(..., help="Transcription to classify.")) -> None:
    """Show how the noise filter treats a transcription."""
    noise_filter = NoiseFilter()
    result = noise_filter.filter(text)
    console.print(f"[bold]Filtered:[/bold] {escape(repr(result.filtered_text))}")
    console.print(f"[bold]Noise:[/bold] {result.is_noise} (confidence {result.confidence:.1f})")
    if result.noise_descriptions:
        console.print(f"[bold]Stripped:[/bold] {escape(', '.join(result.noise_descriptions))}")
    console.print(f"[bold]Likely speech:[/bold] {noise_filter.is_likely_speech(result.filtered_text)}")


@app.command()
def relay(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to listen on."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on."),
    config_path: Optional[List[Path]] = typer.Option(
        None, "--config", "-c", help="YAML config file; may be repeated, later files win."
    ),
    dotenv_path: Optional[Path] = typer.Option(None, "--dotenv-path", help="Optional .env file."),
) -> None:
    """Run the websocket room relay that tour clients join."""
    config = _setup(config_path, dotenv_path)
    server = RoomRelayServer(config.room, host=host, port=port)
    console.print(f"[bold green]Relay on ws://{server.host}:{server.port}[/bold green]")
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down...")


if __name__ == "__main__":
    app()
