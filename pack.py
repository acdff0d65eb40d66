"""Collect SVG icons from a directory and pack them into one <symbol> sprite."""

import asyncio
import logging
from pathlib import Path
from typing import List, Protocol, Sequence

from lxml import etree
from tqdm import tqdm

from errors import CompileError, DirectoryUnavailable
from svg import SVG_NS, XLINK_NS, cleanup_svg, parse_svg, to_symbol
from utils import IconFile, SpriteConfig

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def collect(directory: Path) -> List[IconFile]:
    """Read every file in `directory` (not recursive), in the order the file system lists them.

    Sub-directories and other non-file entries are skipped. Any listing or read
    error aborts the whole collection.
    """
    directory = Path(directory)
    icons = []
    try:
        for entry in directory.iterdir():
            if not entry.is_file():
                logging.debug(f"Skipped {entry.name} as it is not a regular file.")
                continue
            icons.append(
                IconFile(
                    name=entry.name,
                    path=entry.resolve(),
                    base=directory,
                    contents=entry.read_bytes(),
                )
            )
    except OSError as e:
        raise DirectoryUnavailable(f"Could not read icons ({e.strerror or e})", directory) from e

    logging.info(f"Collected {len(icons)} icons from {directory}")
    return icons


class SpriteCompiler(Protocol):
    async def compile(self, icons: Sequence[IconFile], config: SpriteConfig) -> str:
        """Return the sprite markup for `icons`, or raise CompileError."""
        ...


class SvgSpriter:
    """Builds an inline symbol sprite with lxml.

    Output only depends on the icons (in the order given) and the config.
    """

    async def compile(self, icons: Sequence[IconFile], config: SpriteConfig) -> str:
        return await asyncio.to_thread(self.compile_sync, list(icons), config)

    def compile_sync(self, icons: Sequence[IconFile], config: SpriteConfig) -> str:
        if not config.symbol:
            raise CompileError("Only symbol mode output can be injected into a template")

        sprite = etree.Element(
            f"{{{SVG_NS}}}svg", nsmap={None: SVG_NS, "xlink": XLINK_NS}
        )
        sprite.set("width", "0")
        sprite.set("height", "0")
        sprite.set("style", "position:absolute")

        seen = {}
        for icon in tqdm(icons, desc="Packing SVGs", unit=" files", leave=False):
            try:
                symbol_id = config.symbol_id(icon.stem)
            except (TypeError, ValueError) as e:
                raise CompileError(
                    f"Could not generate an id for {icon.name!r} ({e})", icon.path
                ) from e
            if symbol_id in seen:
                raise CompileError(
                    f"Duplicate symbol id {symbol_id!r} (also generated by {seen[symbol_id]})",
                    icon.path,
                )
            seen[symbol_id] = icon.name

            try:
                root = parse_svg(icon.contents, icon.name)
            except ValueError as e:
                raise CompileError(str(e), icon.path) from e

            try:
                if "cleanup" in config.transforms:
                    cleanup_svg(root, icon.name)
                to_symbol(root, symbol_id, sprite)
            except (etree.LxmlError, ValueError) as e:
                # lxml rejects names with control characters or stray surrogates as ids
                raise CompileError(f"Could not convert {icon.name!r} ({e})", icon.path) from e
            logging.debug(f"Added {icon.name} as #{symbol_id}")

        etree.cleanup_namespaces(sprite)
        markup = etree.tostring(sprite, encoding="unicode")
        if not config.inline:
            markup = XML_DECLARATION + markup
        return markup
