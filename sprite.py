#!python3
"""Compile a directory of SVG icons into a symbol sprite and inject it into an HTML template.

The template is read once and written once per run. Running two builds against
the same template at the same time is not safe: a change to the file between
the start of the run and the write is detected and the run reports NOT_SAVED, but nothing
stops two runs from starting together.
"""

import argparse
import asyncio
import enum
import json
import logging
import os
import stat
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from errors import CompileError, ConcurrentModification, SpriteError, WriteFailure
from pack import SpriteCompiler, SvgSpriter, collect
from template import DEFAULT_MARKER, Marker, load_template, render
from utils import SpriteConfig, resolve_path, setup_logging

DEFAULT_TEMPLATE = "app.html"


class Status(enum.Enum):
    OK = "ok"
    # Nothing was written; the template is as it was.
    ABORTED = "aborted"
    # The sprite compiled but the template could not be written.
    NOT_SAVED = "not_saved"


@dataclass(frozen=True)
class RunResult:
    status: Status
    path: Path
    icons: int = 0
    created: bool = False
    error: Optional[SpriteError] = None

    @property
    def ok(self) -> bool:
        return self.status is Status.OK


def _snapshot(path: Path) -> Optional[Tuple[int, int]]:
    try:
        st = path.stat()
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size)


def _target_mode(path: Path) -> int:
    """Mode for the rewritten file: the existing one, or what a plain open() would create."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_output(path: Path, html: str, snapshot: Optional[Tuple[int, int]]):
    """Replace `path` with `html` in one step. The old file stays intact on failure."""
    if _snapshot(path) != snapshot:
        raise ConcurrentModification(
            "Template changed on disk during the build; refusing to overwrite it", path
        )

    tmp = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp = Path(f.name)
            f.write(html)
        os.chmod(tmp, _target_mode(path))
        os.replace(tmp, path)
    except OSError as e:
        if tmp is not None and tmp.exists():
            tmp.unlink()
        raise WriteFailure(f"Could not write template ({e.strerror or e})", path) from e


async def run_pipeline(
    directory: Path,
    template: Path,
    config: SpriteConfig,
    compiler: Optional[SpriteCompiler] = None,
    marker: Marker = DEFAULT_MARKER,
) -> RunResult:
    directory, template = Path(directory), Path(template)
    compiler = compiler or SvgSpriter()
    icons = []
    # Taken before compiling so an edit made while the sprite builds is caught too.
    snapshot = _snapshot(template)

    try:
        icons = collect(directory)
        try:
            markup = await compiler.compile(icons, config)
        except SpriteError:
            raise
        except Exception as e:
            raise CompileError(f"Sprite compiler failed ({e})") from e

        document = load_template(template)
        if not document.exists:
            logging.info(f"{template} does not exist, creating it")
        html = render(document, markup, marker)
    except SpriteError as e:
        logging.error(str(e))
        logging.error("✘ SVG sprite could not be generated")
        return RunResult(Status.ABORTED, template, len(icons), error=e)

    try:
        write_output(template, html, snapshot)
    except WriteFailure as e:
        logging.error(str(e))
        logging.error("✘ SVG sprite built but could not be saved")
        return RunResult(Status.NOT_SAVED, template, len(icons), error=e)

    if document.exists:
        logging.info("✔ SVG sprite injected")
    else:
        logging.info("✔ SVG sprite template created")
    return RunResult(Status.OK, template, len(icons), created=not document.exists)


def run(
    directory: Path,
    template: Path,
    config: SpriteConfig,
    compiler: Optional[SpriteCompiler] = None,
    marker: Marker = DEFAULT_MARKER,
) -> RunResult:
    return asyncio.run(run_pipeline(directory, template, config, compiler, marker))


def run_from_options(
    module_options: Mapping[str, Any],
    base: Path,
    aliases: Optional[Mapping[str, Path]] = None,
    compiler: Optional[SpriteCompiler] = None,
) -> RunResult:
    """Run with the build-module option shape.

    `module_options` holds "directory" (required), "templateLocation" (default
    app.html) and "options" (sprite options merged over the defaults). Relative
    paths resolve against `base`; "~" and "@" alias `base` unless `aliases` says
    otherwise.
    """
    if not module_options.get("directory"):
        raise ValueError("The icon 'directory' option is required")

    aliases = {"~": base, "@": base, **(aliases or {})}
    directory = resolve_path(module_options["directory"], base, aliases)
    template = resolve_path(
        module_options.get("templateLocation") or DEFAULT_TEMPLATE, base, aliases
    )
    config = SpriteConfig.from_options(module_options.get("options"))
    return run(directory, template, config, compiler)


def _parse_alias(value: str) -> Tuple[str, Path]:
    name, sep, target = value.partition("=")
    if not sep or not name or not target:
        raise argparse.ArgumentTypeError(f"Expected NAME=DIR, got {value!r}")
    return name, Path(target)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Pack a directory of SVG icons into a symbol sprite and inject it into an HTML template."
    )
    parser.add_argument("directory", help="Directory containing the SVG icons")
    parser.add_argument(
        "--template",
        default=DEFAULT_TEMPLATE,
        help="HTML template to inject into; created if missing (default: %(default)s)",
    )
    parser.add_argument(
        "--base",
        type=Path,
        default=Path("."),
        help="Directory that relative paths and the ~ and @ aliases resolve against",
    )
    parser.add_argument(
        "--options",
        type=Path,
        help="JSON file of sprite options, merged over the defaults",
    )
    parser.add_argument(
        "--alias",
        type=_parse_alias,
        action="append",
        default=[],
        metavar="NAME=DIR",
        help="Extra path alias, may be repeated",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    setup_logging()
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    options = None
    if args.options:
        try:
            options = json.loads(args.options.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            parser.error(f"Could not load options from {args.options}: {e}")

    module_options = {
        "directory": args.directory,
        "templateLocation": args.template,
        "options": options,
    }
    try:
        result = run_from_options(module_options, args.base.resolve(), dict(args.alias))
    except ValueError as e:
        parser.error(str(e))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
