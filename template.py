"""Put sprite markup into an HTML page template.

A template is split around its marker comments into three parts::

    <body>\n  <!-- svg-sprite -->   prefix (ends with the start marker)
    ...old sprite...               region (replaced on every run)
    <!-- endsvg-sprite -->\n</body> suffix (starts with the end marker)

Only the region changes, so running the injection again over its own output
gives the same text.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from errors import DuplicateMarker, MarkerNotFound, TemplateUnreadable

SPRITE_CONTAINER_ID = "svg-defs"
PLACEHOLDERS = ("{{ HTML_ATTRS }}", "{{ HEAD }}", "{{ BODY_ATTRS }}", "{{ APP }}")


@dataclass(frozen=True)
class Marker:
    start: str
    end: str

    @classmethod
    def for_tag(cls, tag: str) -> "Marker":
        return cls(start=f"<!-- {tag} -->", end=f"<!-- end{tag} -->")


DEFAULT_MARKER = Marker.for_tag("svg-sprite")


@dataclass(frozen=True)
class TemplateDocument:
    path: Path
    raw_text: Optional[str]

    @property
    def exists(self) -> bool:
        return self.raw_text is not None


@dataclass(frozen=True)
class MarkedTemplate:
    prefix: str
    region: str
    suffix: str

    def replace_region(self, region: str) -> str:
        return self.prefix + region + self.suffix


def parse_template(
    text: str, marker: Marker = DEFAULT_MARKER, path: Optional[Path] = None
) -> MarkedTemplate:
    starts = text.count(marker.start)
    ends = text.count(marker.end)
    if starts > 1 or ends > 1:
        raise DuplicateMarker(
            f"Expected one {marker.start} ... {marker.end} pair, "
            f"found {starts} start and {ends} end markers",
            path,
        )
    if not starts or not ends:
        raise MarkerNotFound(f"No {marker.start} ... {marker.end} region found", path)

    region_start = text.index(marker.start) + len(marker.start)
    region_end = text.index(marker.end)
    if region_end < region_start:
        raise MarkerNotFound(f"{marker.end} appears before {marker.start}", path)

    return MarkedTemplate(
        prefix=text[:region_start],
        region=text[region_start:region_end],
        suffix=text[region_end:],
    )


def wrap_sprite(markup: str) -> str:
    return f'<div id="{SPRITE_CONTAINER_ID}">{markup}</div>'


def sprite_region(markup: str) -> str:
    return "\n" + wrap_sprite(markup) + "\n"


def inject_text(
    text: str, markup: str, marker: Marker = DEFAULT_MARKER, path: Optional[Path] = None
) -> str:
    return parse_template(text, marker, path).replace_region(sprite_region(markup))


def read_template(path: Path) -> str:
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateUnreadable(f"Could not read template ({e})", path) from e


def inject_existing(path: Path, markup: str, marker: Marker = DEFAULT_MARKER) -> str:
    """Return the template at `path` with its marker region replaced by the sprite."""
    return inject_text(read_template(path), markup, marker, path)


def load_template(path: Path) -> TemplateDocument:
    path = Path(path)
    if not path.exists():
        return TemplateDocument(path, None)
    return TemplateDocument(path, read_template(path))


def render(document: TemplateDocument, markup: str, marker: Marker = DEFAULT_MARKER) -> str:
    if document.exists:
        return inject_text(document.raw_text, markup, marker, document.path)
    return synthesize(markup, marker)


SCAFFOLD = """<!DOCTYPE html>
<html {html_attrs}>
  <head>
    {head}
    <style>
      #{container} {{
        width: 0;
        height: 0;
        overflow: hidden;
        position: absolute;
      }}
    </style>
  </head>
  <body {body_attrs}>
    {start}{region}{end}
    {app}
  </body>
</html>
"""


def synthesize(markup: str, marker: Marker = DEFAULT_MARKER) -> str:
    """Build a fresh page template around the sprite.

    The placeholders are left for the host framework's own templating to fill.
    """
    html_attrs, head, body_attrs, app = PLACEHOLDERS
    return SCAFFOLD.format(
        html_attrs=html_attrs,
        head=head,
        container=SPRITE_CONTAINER_ID,
        body_attrs=body_attrs,
        start=marker.start,
        region=sprite_region(markup),
        end=marker.end,
        app=app,
    )
