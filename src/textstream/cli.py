from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from .buffer import TextBuffer
from .config import ReaderConfig, load_reader_config
from .errors import ReaderError
from .reader import TextStreamReader, open_text_stream
from .stream_parser import iter_decoded_lines

app = typer.Typer(add_completion=False, help="textstream: decode legacy-encoded text streams to UTF-8")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log decoding details to stderr"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_config(
    config: Path | None,
    encoding: str | None,
    trap: str | None,
    chunk_size: int | None,
) -> ReaderConfig:
    cfg = load_reader_config(config)
    if encoding is not None:
        cfg.encoding = encoding
    if trap is not None:
        cfg.trap = trap
    if chunk_size is not None:
        cfg.chunk_size = chunk_size
    return cfg


@contextmanager
def _open_reader(path: str, cfg: ReaderConfig) -> Iterator[TextStreamReader]:
    try:
        if path == "-":
            reader = TextStreamReader(
                typer.get_binary_stream("stdin"), cfg.encoding, cfg.trap, chunk_size=cfg.chunk_size
            )
        else:
            reader = open_text_stream(path, cfg.encoding, cfg.trap, chunk_size=cfg.chunk_size)
    except (LookupError, ValueError) as e:
        typer.secho(f"Invalid reader settings: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from e
    except OSError as e:
        typer.secho(f"Cannot open {path}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from e

    if path == "-":
        # stdin stays open; only the reader goes away.
        yield reader
        return
    with reader:
        yield reader


_ENCODING_OPT = typer.Option(None, "--encoding", "-e", help="Source encoding (any Python codec label)")
_TRAP_OPT = typer.Option(None, "--trap", "-t", help="strict|replace|ignore or a codecs error handler name")
_CONFIG_OPT = typer.Option(
    None,
    "--config",
    help="Reader settings YAML (defaults to textstream.yaml found from the cwd upwards)",
)


@app.command()
def cat(
    files: list[str] = typer.Argument(..., help="Files to decode; '-' reads stdin"),
    encoding: str | None = _ENCODING_OPT,
    trap: str | None = _TRAP_OPT,
    chunk_size: int | None = typer.Option(None, "--chunk-size", help="Bytes pulled from the source per read"),
    config: Path | None = _CONFIG_OPT,
) -> None:
    """Decode whole files and write the text to stdout."""

    cfg = _resolve_config(config, encoding, trap, chunk_size)
    for path in files:
        with _open_reader(path, cfg) as reader:
            buf = TextBuffer()
            try:
                while reader.read_line(buf):
                    typer.echo(buf.getvalue(), nl=False)
                    buf.clear()
                # read_line tolerates a truncated final character; this does not.
                reader.read_to_end(buf)
            except ReaderError as e:
                typer.secho(f"{path}: {e}", fg=typer.colors.RED, err=True)
                raise typer.Exit(code=1) from e


@app.command()
def lines(
    file: str = typer.Argument(..., help="File to decode; '-' reads stdin"),
    encoding: str | None = _ENCODING_OPT,
    trap: str | None = _TRAP_OPT,
    number: bool = typer.Option(False, "--number", "-n", help="Prefix each line with its number"),
    config: Path | None = _CONFIG_OPT,
) -> None:
    """Print decoded lines; undecodable lines are reported and skipped."""

    cfg = _resolve_config(config, encoding, trap, None)
    with _open_reader(file, cfg) as reader:
        try:
            for dl in iter_decoded_lines(reader):
                if dl.error is not None:
                    typer.secho(f"{file}:{dl.number}: {dl.error}", fg=typer.colors.RED, err=True)
                    continue
                typer.echo(f"{dl.number:6d}\t{dl.text}" if number else dl.text)
        except ReaderError as e:
            typer.secho(f"{file}: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from e


def main() -> None:
    # Entry point for console script.
    app()


if __name__ == "__main__":
    main()
