"""
PageScan CLI - Command line interface for document scanning.

Usage:
    pagescan detect <image> [options]
    pagescan process <image> [options]
    pagescan batch <directory> [options]
    pagescan config [options]
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.progress import Progress
from rich.table import Table

from pagescan import __version__
from pagescan.types import ColorMode, DetectionTier

# Create CLI app
app = typer.Typer(
    name="pagescan",
    help="PageScan - Document boundary detection and page flattening",
    add_completion=False
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"PageScan version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug logging"
    ),
):
    """PageScan - Document boundary detection and page flattening."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _load_cfg(config: Optional[Path]):
    from pagescan.config import load_config, Config

    if config and config.exists():
        return load_config(str(config))
    return Config()


def _parse_corners(corners: str):
    from pagescan.types import DocumentBounds

    try:
        coords = [float(v) for v in corners.split(",")]
        return DocumentBounds.from_list(coords)
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid corners '{corners}': {e}")
        raise typer.Exit(2)


@app.command()
def detect(
    file: Path = typer.Argument(..., help="Path to image file"),
    tier: DetectionTier = typer.Option(
        DetectionTier.FINAL_CAPTURE, "--tier", "-t",
        help="Detection quality tier"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Path to YAML config file"
    ),
):
    """
    Detect the document outline in an image and print its corners.

    Example:
        pagescan detect photo.jpg --tier interactive
    """
    if not file.exists():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    from pagescan.detect import BoundaryDetector, quadrilateral_area
    from pagescan.io.image import load_image

    cfg = _load_cfg(config)
    image = load_image(file)
    bounds = BoundaryDetector(cfg.detection).detect(image, tier)

    if bounds is None:
        console.print(f"[yellow]No document found in[/yellow] {file}")
        raise typer.Exit(1)

    table = Table(title=f"Document corners ({tier.value})")
    table.add_column("Corner", style="cyan")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")

    for name, point in zip(("top-left", "top-right", "bottom-right", "bottom-left"), bounds.points):
        table.add_row(name, f"{point.x:.1f}", f"{point.y:.1f}")

    console.print(table)
    console.print(f"  Area: {quadrilateral_area(bounds):.0f} px²")


@app.command()
def process(
    file: Path = typer.Argument(..., help="Path to image file"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Output image path (default: <output dir>/<name>_scan.jpg)"
    ),
    mode: ColorMode = typer.Option(
        ColorMode.COLOR, "--mode", "-m",
        help="Output color mode"
    ),
    enhance: bool = typer.Option(
        True, "--enhance/--no-enhance",
        help="Apply adaptive contrast enhancement"
    ),
    tier: DetectionTier = typer.Option(
        DetectionTier.FINAL_CAPTURE, "--tier", "-t",
        help="Detection quality tier"
    ),
    corners: Optional[str] = typer.Option(
        None, "--corners",
        help="Manual corners x1,y1,...,x4,y4 (TL, TR, BR, BL); skips detection"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Path to YAML config file"
    ),
):
    """
    Detect, flatten and enhance a single document photo.

    Example:
        pagescan process photo.jpg -o page.png --mode black_and_white
    """
    if not file.exists():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    from pagescan.errors import ImageDecodeError
    from pagescan.pipeline import DocumentScanner, ScanOptions

    cfg = _load_cfg(config)
    options = ScanOptions(
        tier=tier,
        color_mode=mode,
        enhance_contrast=enhance,
        bounds=_parse_corners(corners) if corners else None,
    )

    try:
        result = DocumentScanner(cfg).scan_file(file, output, options)
    except (ImageDecodeError, ValueError, OSError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        raise typer.Exit(1)

    h, w = result.image.shape[:2]
    console.print(f"[green]✓ Success[/green]")
    console.print(f"  Corners: {result.bounds_source}")
    console.print(f"  Output size: {w}x{h}")
    console.print(f"  Saved to: {result.output_path}")
    console.print(f"  Processing time: {result.elapsed_seconds:.2f}s")


@app.command()
def batch(
    directory: Path = typer.Argument(..., help="Directory containing photos"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Output directory (default: ./output)"
    ),
    mode: ColorMode = typer.Option(
        ColorMode.COLOR, "--mode", "-m",
        help="Output color mode"
    ),
    enhance: bool = typer.Option(
        True, "--enhance/--no-enhance",
        help="Apply adaptive contrast enhancement"
    ),
    tier: DetectionTier = typer.Option(
        DetectionTier.FINAL_CAPTURE, "--tier", "-t",
        help="Detection quality tier"
    ),
    pattern: str = typer.Option(
        "*", "--pattern", "-p",
        help="File pattern to match (e.g., *.jpg)"
    ),
    recursive: bool = typer.Option(
        False, "--recursive", "-r",
        help="Search subdirectories"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Path to YAML config file"
    ),
):
    """
    Scan every supported image in a directory.

    Example:
        pagescan batch ./photos -o ./scans --mode grayscale --tier interactive
    """
    if not directory.exists():
        console.print(f"[red]Error:[/red] Directory not found: {directory}")
        raise typer.Exit(1)

    from pagescan.errors import ImageDecodeError
    from pagescan.io.image import SUPPORTED_FORMATS
    from pagescan.pipeline import DocumentScanner, ScanOptions

    candidates = directory.rglob(pattern) if recursive else directory.glob(pattern)
    files = sorted(f for f in candidates if f.is_file() and f.suffix.lower() in SUPPORTED_FORMATS)

    if not files:
        console.print(f"[yellow]No images found matching pattern:[/yellow] {pattern}")
        raise typer.Exit(0)

    console.print(f"[blue]PageScan[/blue] Found {len(files)} images to process")

    cfg = _load_cfg(config)
    if output:
        cfg.output.dir = str(output)

    scanner = DocumentScanner(cfg)
    options = ScanOptions(tier=tier, color_mode=mode, enhance_contrast=enhance)

    failures = []
    detected_count = 0
    with Progress(console=console) as progress:
        task = progress.add_task("Processing...", total=len(files))

        for file in files:
            progress.update(task, description=f"Processing: {file.name}")
            try:
                result = scanner.scan_file(file, options=options)
                detected_count += int(result.detected)
            except (ImageDecodeError, ValueError, OSError) as e:
                failures.append((file, e))
            progress.advance(task)

    console.print()
    console.print(f"[green]Completed:[/green] {len(files) - len(failures)}/{len(files)} images processed "
                  f"({detected_count} with detected corners)")

    if failures:
        console.print()
        console.print("[red]Failed files:[/red]")
        for file, error in failures:
            console.print(f"  - {file.name}: {error}")


@app.command("config")
def config_cmd(
    show: bool = typer.Option(
        False, "--show", "-s",
        help="Show current configuration"
    ),
    generate: bool = typer.Option(
        False, "--generate", "-g",
        help="Generate default config file"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Output path for generated config"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Path to YAML config file to show"
    ),
):
    """
    Configuration management.

    Example:
        pagescan config -o config.yaml
        pagescan config --show
    """
    from pagescan.config import save_config

    cfg = _load_cfg(config)

    if show:
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Interactive", style="white")
        table.add_column("Final capture", style="white")

        interactive = cfg.detection.interactive
        final = cfg.detection.final_capture
        table.add_row("Max dimension", str(interactive.max_dimension), str(final.max_dimension))
        table.add_row("Blur kernel", str(interactive.blur_kernel), str(final.blur_kernel))
        table.add_row("Canny thresholds", f"{interactive.canny_low:g}/{interactive.canny_high:g}",
                      f"{final.canny_low:g}/{final.canny_high:g}")
        table.add_row("Morph kernel", str(interactive.morph_kernel), str(final.morph_kernel))
        table.add_row("Area ratio", f"{interactive.min_area_ratio:g}-{interactive.max_area_ratio:g}",
                      f"{final.min_area_ratio:g}-{final.max_area_ratio:g}")
        table.add_row("Min perimeter", f"{interactive.min_perimeter:g}", f"{final.min_perimeter:g}")
        table.add_row("Epsilon factors", ", ".join(f"{e:g}" for e in interactive.epsilon_factors),
                      ", ".join(f"{e:g}" for e in final.epsilon_factors))

        console.print(table)
        console.print(f"  CLAHE clip limit: {cfg.enhance.clahe_clip_limit}")
        console.print(f"  Binarization block/C: {cfg.enhance.binarize_block_size}/{cfg.enhance.binarize_c}")
        console.print(f"  Output dir: {cfg.output.dir}")
    elif generate or output:
        if output:
            save_config(cfg, str(output))
            console.print(f"[green]Config written to:[/green] {output}")
        else:
            import yaml
            from dataclasses import asdict
            console.print(yaml.dump(asdict(cfg), default_flow_style=False, sort_keys=False))
    else:
        console.print("Use --show to display config, or --generate / -o PATH to write one")


def main_entry():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    main_entry()
