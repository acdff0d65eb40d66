from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple
import copy
import logging
import re


COLORS = {
    "DEBUG": "\033[36m",  # cyan
    "INFO": "\033[32m",  # green
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[1;31m",  # bold red
}
COLOR_RESET = "\033[0m"


class ColorFormatter(logging.Formatter):
    def format(self, record):
        color = COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname}{COLOR_RESET}"
        return super().format(record)


def setup_logging():
    handler = logging.StreamHandler()
    handler.setFormatter(ColorFormatter("%(levelname)s %(message)s"))
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.INFO)


DEFAULT_OPTIONS: Dict[str, Any] = {
    "shape": {
        "id": {"generator": "icon-%s"},
        "transform": ["cleanup"],
    },
    "mode": {
        "inline": True,
        "symbol": True,
    },
}

KNOWN_TRANSFORMS = ("cleanup",)
WHITESPACE_RE = re.compile(r"\s+")


def merge_options(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Layer caller options over DEFAULT_OPTIONS.

    Each top-level key the caller supplies replaces the default one wholesale, so
    passing {"shape": {...}} drops the default transforms too. Neither argument is
    modified; the result is a fresh deep copy.
    """
    merged = copy.deepcopy(DEFAULT_OPTIONS)
    for key, value in (overrides or {}).items():
        merged[key] = copy.deepcopy(value)
    return merged


def _as_tuple(value) -> Tuple[Any, ...]:
    if isinstance(value, (str, Mapping)):
        return (value,)
    return tuple(value or ())


def _enabled(value) -> bool:
    # A mode may be a flag or a settings object. An empty object still enables it.
    return value is not None and value is not False


@dataclass(frozen=True)
class SpriteConfig:
    id_generator: str = "icon-%s"
    id_whitespace: str = "_"
    transforms: Tuple[str, ...] = ("cleanup",)
    inline: bool = True
    symbol: bool = True

    def __post_init__(self):
        if "%s" not in self.id_generator:
            raise ValueError(
                f"Id generator must contain a %s placeholder (got {self.id_generator!r})"
            )
        unknown = [t for t in self.transforms if t not in KNOWN_TRANSFORMS]
        if unknown:
            raise ValueError(f"Unknown shape transform(s): {', '.join(map(str, unknown))}")

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "SpriteConfig":
        """Build a config from the nested option shape, after merging in the defaults."""
        merged = merge_options(options)
        shape = merged.get("shape") or {}
        shape_id = shape.get("id") or {}
        mode = merged.get("mode") or {}
        return cls(
            id_generator=shape_id.get("generator", cls.id_generator),
            id_whitespace=shape_id.get("whitespace", cls.id_whitespace),
            transforms=_as_tuple(shape.get("transform", ())),
            inline=_enabled(mode.get("inline")),
            symbol=_enabled(mode.get("symbol")),
        )

    def symbol_id(self, stem: str) -> str:
        return self.id_generator % WHITESPACE_RE.sub(self.id_whitespace, stem)


@dataclass(frozen=True)
class IconFile:
    name: str
    path: Path
    base: Path
    contents: bytes = field(repr=False)

    def __post_init__(self):
        if not self.name:
            raise ValueError(f"Icon name must not be empty (path={self.path})")

    @property
    def stem(self) -> str:
        return Path(self.name).stem


def resolve_path(
    path, base: Path, aliases: Optional[Mapping[str, Path]] = None
) -> Path:
    """Resolve `path` against an explicit base directory.

    An alias only matches the whole first segment, so "~/icons" uses the "~" alias
    but "~icons" does not. Without a "~" alias a leading tilde means the home
    directory.
    """
    path = str(path)
    head, sep, rest = path.replace("\\", "/").partition("/")
    if aliases and head in aliases:
        return (Path(aliases[head]) / rest).resolve() if sep else Path(aliases[head]).resolve()

    candidate = Path(path)
    if head == "~":
        candidate = candidate.expanduser()
    if candidate.is_absolute():
        return candidate
    return (Path(base) / candidate).resolve()
