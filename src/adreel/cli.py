"""CLI entry point for the ad video generator."""

import logging
from pathlib import Path
from typing import List, Optional

import typer

from . import __version__
from .config import config
from .errors import EncoderFailure, InvalidScript, PipelineError
from .models import AspectRatio, Product, Script, resolve_aspect_ratio

app = typer.Typer(
    name="adreel",
    help="Turn short marketing scripts into rendered videos",
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
        typer.echo(f"adreel version {__version__}")
        raise typer.Exit()


def _load_script(path: Path) -> Script:
    try:
        return Script.from_yaml(path)
    except InvalidScript as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)


def _save_script(script: Script, output: Path) -> None:
    try:
        script.to_yaml(output)
    except OSError as e:
        typer.echo(f"❌ Error saving script: {e}")
        raise typer.Exit(1)
    typer.echo(f"✅ Script saved: {output}")


def _echo_scenes(script: Script) -> None:
    typer.echo("\n📽️  Scenes:")
    for scene in script.scenes:
        typer.echo(
            f"   [{scene.index}] {scene.kind.value}: {scene.duration_seconds:g}s "
            f"({scene.decoration_tag})"
        )
        if scene.text:
            preview = scene.text[:60] + "..." if len(scene.text) > 60 else scene.text
            typer.echo(f"      → {preview}")


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
    """Ad Reel - render marketing scripts into videos."""
    pass


@app.command()
def status(
    script: Path = typer.Option(
        Path("script.yaml"),
        "--script",
        "-s",
        help="Path to script YAML file",
    )
) -> None:
    """Show a script's scenes and total duration."""
    if not script.exists():
        typer.echo(f"❌ No script found at {script}")
        typer.echo("   Run 'adreel write' or 'adreel parse' to create one")
        raise typer.Exit(1)

    loaded = _load_script(script)
    typer.echo(f"📁 Script: {loaded.title or script.name}")
    typer.echo(f"   Scenes: {len(loaded.scenes)}")
    typer.echo(f"   Total duration: {loaded.total_duration_seconds:.1f}s")
    if loaded.price:
        typer.echo(f"   Price: {loaded.price}")
    _echo_scenes(loaded)


@app.command()
def render(
    script: Path = typer.Argument(
        ...,
        help="Path to script YAML file",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    ratio: str = typer.Option(
        AspectRatio.LANDSCAPE.value,
        "--ratio",
        "-r",
        help="Aspect ratio: 16:9, 9:16 or 1:1 (anything else means 16:9)"
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for the finished video"
    ),
    video_id: Optional[str] = typer.Option(
        None,
        "--id",
        help="Video identifier (random if omitted)"
    ),
    image: Optional[Path] = typer.Option(
        None,
        "--image",
        "-i",
        help="Focal image for scenes that don't name one"
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Concurrent scene renders",
        min=1,
        max=32
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging"
    ),
) -> None:
    """Render a script into an MP4 video."""
    from .render import VideoPipeline

    setup_logging(verbose)
    loaded = _load_script(script)

    if image is not None:
        if not image.exists():
            typer.echo(f"⚠️  Focal image not found: {image}")
        loaded = loaded.model_copy(update={
            "scenes": [
                scene if scene.focal_image else scene.model_copy(update={"focal_image": image})
                for scene in loaded.scenes
            ]
        })

    resolved = resolve_aspect_ratio(ratio)
    if resolved.value != ratio:
        typer.echo(f"⚠️  Unsupported aspect ratio {ratio!r}, using {resolved.value}")

    overrides = {}
    if workers:
        overrides["max_workers"] = workers
    cfg = config.model_copy(update={"output_dir": output_dir}) if output_dir else config

    typer.echo(f"🎬 Rendering {script} ({len(loaded.scenes)} scenes, {resolved.value})")
    try:
        pipeline = VideoPipeline.from_config(cfg, **overrides)
        artifact = pipeline.generate(loaded, aspect_ratio=resolved.value, video_id=video_id)
    except EncoderFailure as e:
        typer.echo(f"❌ Encoding failed: {e}")
        raise typer.Exit(1)
    except PipelineError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    typer.echo(f"✅ Video generated: {artifact.path}")
    typer.echo(f"   Duration: {artifact.duration_seconds:.1f}s")
    typer.echo(f"   Resolution: {artifact.width}x{artifact.height}")
    typer.echo(f"   Size: {artifact.size_bytes} bytes")


@app.command()
def parse(
    copy_file: Path = typer.Argument(
        ...,
        help="Text file with HOOK/BENEFITS/CTA/FULL_SCRIPT ad copy",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    title: str = typer.Option("Amazing Product", "--title", "-t", help="Product title"),
    price: Optional[str] = typer.Option(None, "--price", "-p", help="Display price"),
    image: Optional[Path] = typer.Option(None, "--image", "-i", help="Focal image path"),
    output: Path = typer.Option(
        Path("script.yaml"),
        "--output",
        "-o",
        help="Output script file path"
    ),
) -> None:
    """Turn free-form ad copy into a scene script."""
    from .storyboard import build_script, parse_ad_copy

    product = Product(title=title, price=price)
    copy = parse_ad_copy(copy_file.read_text(), product)
    script = build_script(copy, product, focal_image=image)
    _save_script(script, output)
    _echo_scenes(script)


@app.command()
def write(
    title: str = typer.Argument(..., help="Product title"),
    price: Optional[str] = typer.Option(None, "--price", "-p", help="Display price"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Product description"),
    feature: Optional[List[str]] = typer.Option(None, "--feature", "-f", help="Key feature (repeatable)"),
    brand: Optional[str] = typer.Option(None, "--brand", help="Brand name"),
    image: Optional[Path] = typer.Option(None, "--image", "-i", help="Focal image path"),
    offline: bool = typer.Option(False, "--offline", help="Skip Claude and use template copy"),
    output: Path = typer.Option(
        Path("script.yaml"),
        "--output",
        "-o",
        help="Output script file path"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Write an ad script for a product with Claude."""
    from .storyboard import build_script, fallback_copy

    setup_logging(verbose)
    product = Product(
        title=title,
        price=price,
        description=description,
        key_features=feature or None,
        brand=brand,
    )
    typer.echo(f"✍️  Writing script for: {product.title}")

    if offline or not config.anthropic_api_key:
        if not offline:
            typer.echo("⚠️  ANTHROPIC_API_KEY not set, using template copy")
        script = build_script(fallback_copy(product), product, focal_image=image)
    else:
        from .agents import CopywriterAgent

        agent = CopywriterAgent(focal_image=image)
        typer.echo(f"   Using model: {agent.model}")
        script = agent.run(product)

    _save_script(script, output)
    typer.echo(f"   Total duration: {script.total_duration_seconds:.1f}s")
    _echo_scenes(script)


if __name__ == "__main__":
    app()
