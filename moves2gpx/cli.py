"""
Command-line interface for the Moveslink to GPX conversion tool.
"""

import click
import logging
from pathlib import Path
import sys

import gpxpy

from . import __version__
from .errors import ConversionError
from .models import TAG_FIELDS
from .parser import BatchConverter

# Set up logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose):
    """Moveslink to GPX conversion tool.

    Convert Suunto Moveslink .sml exports to GPX tracks for Strava.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")


@cli.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Directory for the generated GPX files",
)
@click.option(
    "--progress/--no-progress", default=True, help="Show a progress bar"
)
def convert(files, output_dir, progress):
    """Convert Moveslink exports to GPX files.

    FILES: .sml files, converted in order. Conversion stops at the first
    file that cannot be converted.
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    click.echo(f"🔄 Converting {len(files)} file(s) with moves2gpx v{__version__}")
    click.echo(f"📤 Output: {output_path}")

    batch = BatchConverter(output_path, show_progress=progress)
    try:
        results = batch.convert_files(list(files))
    except ConversionError as e:
        failed = files[len(batch.results)]
        click.echo(f"❌ Error converting {failed}: {e}", err=True)
        skipped = len(files) - len(batch.results) - 1
        if skipped:
            click.echo(f"⏭️  Skipped {skipped} remaining file(s)", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)

    for result in results:
        dropped = (
            f", {result.samples_dropped} dropped" if result.samples_dropped else ""
        )
        click.echo(
            f"   • {result.output_path.name}: {result.points_written} points{dropped}"
        )
    click.echo(f"✅ Conversion completed! {len(results)} GPX file(s) written")


@cli.command()
@click.argument("gpx_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(gpx_file):
    """Summarize a GPX file.

    GPX_FILE: a track written by the convert command
    """
    try:
        with open(gpx_file, "r", encoding="utf-8") as f:
            gpx = gpxpy.parse(f)
    except Exception as e:
        click.echo(f"❌ Error reading {gpx_file}: {e}", err=True)
        logger.exception("Error reading GPX file")
        sys.exit(1)

    points = [
        point
        for track in gpx.tracks
        for segment in track.segments
        for point in segment.points
    ]
    with_hr = 0
    for point in points:
        for extension in point.extensions:
            if any(child.tag.endswith("}hr") for child in extension):
                with_hr += 1
                break

    click.echo(f"📄 {gpx_file.name}")
    click.echo("=" * 50)
    click.echo(f"🗺️  Tracks: {len(gpx.tracks)}")
    click.echo(f"   • Segments: {sum(len(track.segments) for track in gpx.tracks)}")
    click.echo(f"   • Points: {len(points)}")
    click.echo(f"   • Points with heart rate: {with_hr}")

    time_bounds = gpx.get_time_bounds()
    if time_bounds.start_time:
        click.echo(f"⏱️  Start: {time_bounds.start_time.isoformat()}")
        click.echo(f"   End: {time_bounds.end_time.isoformat()}")

    click.echo(f"📏 Length (2D): {gpx.length_2d():.1f} m")


@cli.command()
def info():
    """Show the telemetry fields and unit conversions applied."""
    click.echo(f"moves2gpx v{__version__}")
    click.echo("=" * 50)

    click.echo("\n📊 Recognized Moveslink tags:")
    for tag, sample_field in TAG_FIELDS.items():
        click.echo(f"   • {tag} -> {sample_field.value}")

    click.echo("\n🔧 Conversions:")
    click.echo("   • Latitude/Longitude: radians -> degrees")
    click.echo("   • HR, Cadence: per second -> per minute (rounded)")
    click.echo("   • Temperature: Kelvin - 273.16 -> Celsius")
    click.echo("   • Sea level pressure: Pa -> millibar (rounded)")

    click.echo("\n🎯 Usage:")
    click.echo("1. Find your exports in ~/Library/Application Support/Suunto/Moveslink2")
    click.echo("2. Run: moves2gpx convert path/to/*.sml")
    click.echo("3. Upload the Move_*_Running.gpx files to Strava")


def main():
    """Main entry point for the CLI."""
    cli(auto_envvar_prefix="MOVES2GPX")


if __name__ == "__main__":
    main()
