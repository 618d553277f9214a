"""YPF Toolkit CLI."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .errors import YPFError
from .utils.text import resolve_codepage
from .ypf.header import DEFAULT_CODEPAGE, DEFAULT_VERSION


def _codepage_callback(ctx, param, value):
    try:
        resolve_codepage(value)
    except ValueError as e:
        raise click.BadParameter(str(e))
    return int(value) if value.isdigit() else value


codepage_option = click.option(
    "-c",
    "--codepage",
    default=str(DEFAULT_CODEPAGE),
    show_default=True,
    callback=_codepage_callback,
    help="Filename codepage (Windows code page number or Python codec name)",
)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Log progress (-vv for per-file detail)")
def main(verbose: int):
    """YPF Toolkit - Extract and build YU-RIS YPF archives.

    \b
    list     Show the archive directory
    info     Show the archive header
    extract  Extract every member file
    pack     Build an archive from a directory
    """
    if verbose:
        level = logging.DEBUG if verbose > 1 else logging.INFO
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@main.command("list")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@codepage_option
def list_cmd(archive: Path, codepage):
    """List files in a YPF archive in payload order."""
    from .ypf import YPFReader

    try:
        with YPFReader(archive, codepage) as reader:
            click.echo(f"Files in archive ({len(reader.entries)}):")
            for entry in reader.entries:
                flag = "z" if entry.is_compressed else "-"
                click.echo(
                    f"  {flag} {entry.offset:>10} {entry.compressed_size:>10} {entry.raw_size:>10}  {entry.filename}"
                )

    except (YPFError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@codepage_option
def info(archive: Path, codepage):
    """Show the header of a YPF archive."""
    from .ypf import YPFReader

    try:
        with YPFReader(archive, codepage) as reader:
            header = reader.header
            profile = header.profile
            click.echo(f"Version:        {header.version}")
            click.echo(f"Entries:        {header.entry_count}")
            click.echo(f"Directory size: {header.directory_size}")
            click.echo(f"Offset width:   {profile.offset_width * 8}-bit")
            click.echo(f"Name key:       {profile.cipher_key}")
            click.echo(f"Payload bytes:  {reader.path.stat().st_size - header.directory_size}")

    except (YPFError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default: <archive_name>_extracted)",
)
@codepage_option
def extract(archive: Path, output: Optional[Path], codepage):
    """Extract all files from a YPF archive.

    Data checksum mismatches are reported but do not stop extraction.
    """
    from .ypf import YPFReader

    click.echo(f"Opening: {archive}")

    try:
        with YPFReader(archive, codepage) as reader:
            if output is None:
                output = archive.parent / f"{archive.stem}_extracted"

            click.echo(f"Output:  {output}")
            click.echo()

            extracted_count = 0
            with click.progressbar(
                reader.extract_all(output),
                length=len(reader.entries),
                label="Extracting",
                item_show_func=lambda x: x[0] if x else "",
            ) as items:
                for _ in items:
                    extracted_count += 1

            click.echo()
            click.echo(f"Extracted: {extracted_count} files")
            if reader.checksum_failures:
                click.echo(f"Warning: {len(reader.checksum_failures)} files failed the data checksum:", err=True)
                for name in reader.checksum_failures:
                    click.echo(f"  {name}", err=True)

    except (YPFError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("source", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--format-version",
    "version",
    type=click.IntRange(0, 0xFFFFFFFF),
    default=DEFAULT_VERSION,
    show_default=True,
    help="YPF format version to write",
)
@codepage_option
@click.option(
    "--level",
    type=click.IntRange(0, 9),
    default=6,
    show_default=True,
    help="zlib compression level",
)
def pack(source: Path, output: Path, version: int, codepage, level: int):
    """Build a YPF archive from a directory.

    Files named *.ycg are stored without the .ycg suffix and tagged as YCG
    images.
    """
    from .ypf import write_archive

    click.echo(f"Packing: {source}")
    click.echo(f"Version: {version}")

    try:
        count = write_archive(source, output, version=version, codepage=codepage, level=level)
        click.echo(f"Created: {output} ({count} files)")

    except (YPFError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
