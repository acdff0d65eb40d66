"""Shared fixtures: small SVG icons and a deterministic stand-in compiler."""

from typing import List, Sequence

import pytest

from errors import CompileError
from utils import IconFile, SpriteConfig

ARROW_SVG = b"""<?xml version="1.0" encoding="UTF-8"?>
<!-- Generator: hand -->
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="none">
  <path d="M5 12h14M13 6l6 6-6 6" stroke="currentColor"/>
</svg>
"""

CHECK_SVG = b"""<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16">
  <path d="M2 8l4 4 8-8"/>
</svg>
"""

INKSCAPE_SVG = b"""<svg xmlns="http://www.w3.org/2000/svg"
     xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"
     xmlns:sodipodi="http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd"
     width="10" height="10" inkscape:version="1.2">
  <sodipodi:namedview id="base"/>
  <metadata><title>junk</title></metadata>
  <g transform="translate(-2, -3)" inkscape:label="Layer 1">
    <rect x="2" y="3" width="10" height="10" style="fill:#000;-inkscape-stroke:none"/>
  </g>
</svg>
"""


@pytest.fixture
def icon_dir(tmp_path):
    d = tmp_path / "icons"
    d.mkdir()
    (d / "arrow.svg").write_bytes(ARROW_SVG)
    (d / "check.svg").write_bytes(CHECK_SVG)
    return d


@pytest.fixture
def config():
    return SpriteConfig()


def make_icon(name: str, contents: bytes, tmp_path) -> IconFile:
    return IconFile(name=name, path=tmp_path / name, base=tmp_path, contents=contents)


class FakeCompiler:
    """Emits one <symbol> per icon, sorted by name, without touching lxml."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[List[str]] = []

    async def compile(self, icons: Sequence[IconFile], config: SpriteConfig) -> str:
        self.calls.append([icon.name for icon in icons])
        if self.fail:
            raise CompileError("fake compiler failure")
        symbols = "".join(
            f'<symbol id="{config.symbol_id(icon.stem)}"></symbol>'
            for icon in sorted(icons, key=lambda i: i.name)
        )
        return f"<svg>{symbols}</svg>"


@pytest.fixture
def fake_compiler():
    return FakeCompiler()
