"""CLI entry point for the promotional video generator."""

import asyncio
import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from . import __version__
from .config import config
from .controller import GenerationController, GenerationMode, GenerationStatus
from .models import SUPPORTED_DURATIONS, THEME_CATEGORIES, ResultStatus, VideoScript, get_theme

app = typer.Typer(
    name="promo-video",
    help="AI-powered promotional video generator",
    no_args_is_help=True
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"promo-video version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Promo Video Generator - Theme content to Veo video using AI."""
    pass


class AspectRatio(str, Enum):
    """Supported video aspect ratios."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


def _resolve_theme(theme_id: str):
    try:
        return get_theme(theme_id)
    except KeyError:
        known = ", ".join(t.id for t in THEME_CATEGORIES)
        typer.echo(f"❌ Unknown theme: {theme_id} (choose from {known})")
        raise typer.Exit(1)


def _check_duration(value: int) -> int:
    if value not in SUPPORTED_DURATIONS:
        raise typer.BadParameter("Veo renders 4, 6 or 8 second clips")
    return value


def _preview(text: str, limit: int = 70) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def _print_script(script: VideoScript) -> None:
    typer.echo(f"\n📝 {script.title} ({script.duration:g}s)")
    for scene in script.scenes:
        typer.echo(f"   • {scene.time_start:g}-{scene.time_end:g}s: {scene.visual}")
        if scene.text:
            on_screen = scene.text.replace("\n", " / ")
            typer.echo(f"     text: {on_screen}")
    typer.echo(f"   Voiceover: {script.voiceover}")
    typer.echo(f"   Veo prompt: {_preview(script.prompt)}")


def _build_controller(
    mode: GenerationMode,
    duration: int,
    aspect_ratio: str,
) -> GenerationController:
    """Wire the services from config into a controller."""
    from .agents import ScriptAgent
    from .pipeline import VideoPipeline
    from .services import AssetStore, ContentProvider, VeoClient

    assets = AssetStore()
    pipeline = VideoPipeline.from_config(VeoClient(), assets)
    scripts = ScriptAgent() if mode == GenerationMode.AUTO else None

    def on_status(status: GenerationStatus) -> None:
        if controller.is_busy:
            typer.echo(f"⏳ {controller.status_message()}")

    controller = GenerationController(
        content=ContentProvider(),
        scripts=scripts,
        pipeline=pipeline,
        assets=assets,
        mode=mode,
        duration_seconds=duration,
        aspect_ratio=aspect_ratio,
        on_status=on_status,
    )
    return controller


@app.command()
def themes() -> None:
    """List the available themes."""
    typer.echo("🎨 Themes:")
    for theme in THEME_CATEGORIES:
        typer.echo(f"   {theme.id:<10} {theme.name} - {theme.description}")


@app.command()
def snippets(
    theme_id: str = typer.Argument(
        ...,
        help="Theme identifier (see 'themes')"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging"
    ),
) -> None:
    """Show the content snippets available for a theme."""
    from .services import ContentProvider

    setup_logging(verbose)
    theme = _resolve_theme(theme_id)

    items = asyncio.run(ContentProvider().fetch_snippets(theme.id))

    typer.echo(f"📚 {theme.name} components ({len(items)}):")
    for item in items:
        typer.echo(f"   • {item.name}: {item.content}")


@app.command()
def script(
    theme_id: str = typer.Argument(
        ...,
        help="Theme identifier (see 'themes')"
    ),
    duration: int = typer.Option(
        8,
        "--duration",
        "-d",
        help="Target duration in seconds (4, 6 or 8)",
        callback=_check_duration
    ),
    output: Path = typer.Option(
        Path("script.yaml"),
        "--output",
        "-o",
        help="Output script file path"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate a video script for a theme and save it as YAML."""
    from .agents import ScriptAgent
    from .services import ContentProvider

    setup_logging(verbose)
    theme = _resolve_theme(theme_id)

    try:
        config.validate_script_required()
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    typer.echo(f"🎬 Writing a {duration}s script for theme: {theme.name}")

    async def _run() -> VideoScript:
        items = await ContentProvider().fetch_snippets(theme.id)
        typer.echo(f"   Using {len(items)} components")
        agent = ScriptAgent()
        typer.echo(f"   Using model: {agent.model}")
        return await agent.generate_script(theme.name, theme.description, items, duration)

    try:
        video_script = asyncio.run(_run())
    except Exception as e:
        typer.echo(f"❌ Error generating script: {e}")
        raise typer.Exit(1)

    _print_script(video_script)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        video_script.to_yaml(output)
        typer.echo(f"\n✅ Script saved: {output}")
    except Exception as e:
        typer.echo(f"❌ Error saving script: {e}")
        raise typer.Exit(1)


@app.command()
def generate(
    mode: GenerationMode = typer.Option(
        GenerationMode.FIXED,
        "--mode",
        "-m",
        help="'fixed' submits the predefined ad, 'auto' writes a script for the theme"
    ),
    theme_id: str = typer.Option(
        "safety",
        "--theme",
        "-t",
        help="Theme identifier used in auto mode"
    ),
    script_file: Optional[Path] = typer.Option(
        None,
        "--script",
        "-s",
        help="Submit a saved script YAML instead (see 'script')",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    output: Path = typer.Option(
        Path("output/video.mp4"),
        "--output",
        "-o",
        help="Where to save the generated video"
    ),
    duration: int = typer.Option(
        8,
        "--duration",
        "-d",
        help="Script duration for auto mode (4, 6 or 8); other modes use the script's own",
        callback=_check_duration
    ),
    aspect_ratio: AspectRatio = typer.Option(
        AspectRatio.LANDSCAPE,
        "--aspect-ratio",
        "-a",
        help="Video aspect ratio"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate a promotional video with Veo."""
    setup_logging(verbose)

    literal_script: Optional[VideoScript] = None
    if script_file:
        try:
            literal_script = VideoScript.from_yaml(script_file)
        except Exception as e:
            typer.echo(f"❌ Error loading script: {e}")
            raise typer.Exit(1)

    try:
        config.validate_required()
        if mode == GenerationMode.AUTO and literal_script is None:
            config.validate_script_required()
        controller = _build_controller(mode, duration, aspect_ratio.value)
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    theme = None
    if mode == GenerationMode.AUTO and literal_script is None:
        theme = _resolve_theme(theme_id)

    typer.echo(f"🎬 Generating video ({mode.value} mode)")

    async def _run() -> None:
        if theme is not None:
            await controller.select_theme(theme)
            if controller.status == GenerationStatus.ERROR:
                return
            typer.echo(f"   Theme: {theme.name} ({len(controller.snippets)} components)")
        await controller.generate(script=literal_script)

    try:
        asyncio.run(_run())

        if controller.script:
            _print_script(controller.script)

        result = controller.result
        video_path: Optional[Path] = None

        if controller.status == GenerationStatus.COMPLETED and result and result.asset:
            output.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(result.asset.local_path, output)
            video_path = output
            typer.echo(f"\n✅ {controller.status_message()}")
            typer.echo(f"   Saved: {output}")

        if result is not None:
            from .pipeline import save_generation_record

            record_path = output.with_suffix(".json")
            try:
                save_generation_record(
                    result,
                    record_path,
                    request=controller.request,
                    script=controller.script,
                    video_path=video_path,
                )
                typer.echo(f"📄 Record saved: {record_path}")
            except Exception as e:
                typer.echo(f"⚠️  Failed to save record: {e}")
    finally:
        controller.close()

    if controller.status != GenerationStatus.COMPLETED:
        typer.echo(f"\n❌ {controller.error_message or 'Nothing was generated'}")
        if result is not None and result.status == ResultStatus.PENDING and result.operation_name:
            typer.echo(f"   Resume with: promo-video poll {result.operation_name}")
        raise typer.Exit(1)


@app.command()
def poll(
    operation_name: str = typer.Argument(
        ...,
        help="Operation name printed by a timed-out 'generate'"
    ),
    output: Path = typer.Option(
        Path("output/video.mp4"),
        "--output",
        "-o",
        help="Where to save the generated video"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging"
    ),
) -> None:
    """Resume polling a Veo operation until its video is ready."""
    from .models import OperationHandle
    from .pipeline import VideoPipeline
    from .services import AssetStore, VeoClient

    setup_logging(verbose)

    try:
        config.validate_required()
        assets = AssetStore()
        pipeline = VideoPipeline.from_config(VeoClient(), assets)
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    typer.echo(f"⏳ Polling {operation_name} (up to {pipeline.timeout_seconds:g}s)")
    try:
        result = asyncio.run(pipeline.resume(OperationHandle(name=operation_name)))

        if result.status != ResultStatus.COMPLETED:
            typer.echo(f"❌ {result.error}")
            raise typer.Exit(1)

        output.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(result.asset.local_path, output)
        typer.echo(f"✅ Video saved: {output}")
    finally:
        assets.release_all()


if __name__ == "__main__":
    app()
