"""
file_icons.py
-------------
Builds file-type icons as SVG markup from a file extension.

A request carries the extension plus optional styling:
- textColor (6 hex digits, no leading '#', defaults to white)
- bgColor   (6 hex digits, no leading '#', defaults to a palette color
             picked from a hash of the extension)
- fontSize  (number between 10 and 40, defaults to 26, or 20 for
             extensions of 5+ characters)

The extension is hashed exactly as received and only upper-cased for
display, so "png" and "PNG" can land on different palette colors.

Output is always SVG text. Nothing here rasterizes.
"""

import logging
import re
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


PALETTE = (
    "#F44336",
    "#E91E63",
    "#9C27B0",
    "#673AB7",
    "#3F51B5",
    "#2196F3",
    "#03A9F4",
    "#00BCD4",
)

EXTENSION_RE = re.compile(r"[A-Za-z0-9]{1,10}")
HEX_COLOR_RE = re.compile(r"[0-9A-Fa-f]{6}")
FONT_SIZE_RE = re.compile(r"[0-9]+(\.[0-9]+)?")

MIN_FONT_SIZE = 10
MAX_FONT_SIZE = 40
DEFAULT_FONT_SIZE = "26"
LONG_EXTENSION_FONT_SIZE = "20"
LONG_EXTENSION_LENGTH = 5

DEFAULT_TEXT_COLOR = "#FFFFFF"

TEMPLATE_SLOTS = ("{{ext}}", "{{color}}", "{{bgColor}}", "{{fontSize}}")

DEFAULT_TEMPLATE = """<svg xmlns="http://www.w3.org/2000/svg" width="100" height="120" viewBox="0 0 100 120">
  <path d="M10 0H68L100 32V110A10 10 0 0 1 90 120H10A10 10 0 0 1 0 110V10A10 10 0 0 1 10 0Z" fill="{{bgColor}}"/>
  <path d="M68 0V22A10 10 0 0 0 78 32H100Z" fill="#FFFFFF" fill-opacity="0.35"/>
  <text x="50" y="84" text-anchor="middle" font-family="Fredoka, sans-serif" font-weight="500" font-size="{{fontSize}}" fill="{{color}}">{{ext}}</text>
</svg>
"""

_UINT32_MASK = 0xFFFFFFFF


# ---- Errors ----

class FileIconError(Exception):
    """Base class for every icon generation failure."""

    status_code = 400
    field: Optional[str] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingExtension(FileIconError):
    field = "ext"

    def __init__(self):
        super().__init__("Extension parameter (ext or extension) is required")


class InvalidExtension(FileIconError):
    field = "ext"

    def __init__(self):
        super().__init__(
            "Invalid file extension. Only alphanumeric characters allowed, max 10 characters."
        )


class InvalidTextColor(FileIconError):
    field = "textColor"

    def __init__(self):
        super().__init__("Invalid textColor. Must be a hex color (e.g., 0078d4)")


class InvalidFontSize(FileIconError):
    field = "fontSize"

    def __init__(self):
        super().__init__(
            f"Invalid fontSize. Must be a number between {MIN_FONT_SIZE} and {MAX_FONT_SIZE}"
        )


class InvalidBackgroundColor(FileIconError):
    field = "bgColor"

    def __init__(self):
        super().__init__("Invalid bgColor. Must be a hex color (e.g., f44336)")


class InternalRenderFailure(FileIconError):
    """Server side failure, e.g. the template could not be loaded."""

    status_code = 500

    def __init__(self, details: str):
        super().__init__("Failed to generate file icon")
        self.details = details


class TemplateError(InternalRenderFailure):
    pass


# ---- Stable color selection ----

def get_stable_index(value: str, max_index: int) -> int:
    """
    Map a string to a position in [0, max_index).

    Uses a 31-multiplier rolling hash kept as an unsigned 32-bit integer
    at every step, so the result is the same in every process.
    """
    if max_index <= 0:
        raise ValueError(f"max_index must be positive, got {max_index}")
    hash_value = 0
    for ch in value:
        hash_value = (hash_value * 31 + ord(ch)) & _UINT32_MASK
    return hash_value % max_index


# ---- Request validation ----

class IconRequest(BaseModel):
    """Validated icon parameters. Colors are stored without the leading '#'."""

    model_config = ConfigDict(frozen=True)

    extension: str
    text_color: Optional[str] = None
    background_color: Optional[str] = None
    font_size: Optional[str] = None


def _check_font_size(raw: str) -> str:
    """Plain decimal within range; the caller's text is kept as given."""
    if not FONT_SIZE_RE.fullmatch(raw):
        raise InvalidFontSize()
    if not MIN_FONT_SIZE <= float(raw) <= MAX_FONT_SIZE:
        raise InvalidFontSize()
    return raw


def validate_icon_request(
    ext: Optional[str] = None,
    extension: Optional[str] = None,
    text_color: Optional[str] = None,
    font_size: Optional[str] = None,
    bg_color: Optional[str] = None,
) -> IconRequest:
    """
    Check raw query values in a fixed order and build an IconRequest.

    Empty strings count as absent. The first failing check raises; nothing
    after it is looked at.
    """
    file_extension = ext or extension
    if not file_extension:
        raise MissingExtension()

    if not EXTENSION_RE.fullmatch(file_extension):
        raise InvalidExtension()

    if text_color and not HEX_COLOR_RE.fullmatch(text_color):
        raise InvalidTextColor()

    resolved_font_size = _check_font_size(font_size) if font_size else None

    if bg_color and not HEX_COLOR_RE.fullmatch(bg_color):
        raise InvalidBackgroundColor()

    return IconRequest(
        extension=file_extension,
        text_color=text_color or None,
        background_color=bg_color or None,
        font_size=resolved_font_size,
    )


# ---- Template ----

class FileIconTemplate:
    """SVG skeleton with the four substitution slots."""

    def __init__(self, text: str):
        self.text = text

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "FileIconTemplate":
        """Load the template from disk, or use the embedded one when no path is given."""
        if path is None:
            text = DEFAULT_TEMPLATE
        else:
            try:
                text = Path(path).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise TemplateError(f"Could not read SVG template {path}: {e}") from e

        cls.check(text)
        return cls(text)

    @staticmethod
    def check(text: str) -> None:
        missing = [slot for slot in TEMPLATE_SLOTS if slot not in text]
        if missing:
            raise TemplateError(f"SVG template is missing slots: {', '.join(missing)}")

        soup = BeautifulSoup(text, "xml")
        root = soup.find(True)
        if root is None or root.name != "svg":
            raise TemplateError("SVG template root element must be <svg>")

    def substitute(self, ext: str, color: str, bg_color: str, font_size: str) -> str:
        # Only the first occurrence of each slot is filled
        return (
            self.text
            .replace("{{ext}}", ext, 1)
            .replace("{{color}}", color, 1)
            .replace("{{bgColor}}", bg_color, 1)
            .replace("{{fontSize}}", font_size, 1)
        )


# ---- Rendering ----

class FileIconRenderer:
    """Resolves styling defaults for an IconRequest and fills the template."""

    def __init__(self, template: FileIconTemplate, palette: Sequence[str] = PALETTE):
        if not palette:
            raise ValueError("palette must not be empty")
        self.template = template
        self.palette = tuple(palette)

    def resolve_font_size(self, request: IconRequest) -> str:
        if request.font_size:
            return request.font_size
        if len(request.extension) >= LONG_EXTENSION_LENGTH:
            return LONG_EXTENSION_FONT_SIZE
        return DEFAULT_FONT_SIZE

    def resolve_text_color(self, request: IconRequest) -> str:
        return f"#{request.text_color}" if request.text_color else DEFAULT_TEXT_COLOR

    def resolve_background_color(self, request: IconRequest) -> str:
        if request.background_color:
            return f"#{request.background_color}"
        index = get_stable_index(request.extension, len(self.palette))
        logger.debug(f"Stable index for {request.extension}: {index}")
        return self.palette[index]

    def render(self, request: IconRequest) -> str:
        return self.template.substitute(
            ext=request.extension.upper(),
            color=self.resolve_text_color(request),
            bg_color=self.resolve_background_color(request),
            font_size=self.resolve_font_size(request),
        )


def render_file_icon(
    params: Mapping[str, str],
    template: Optional[FileIconTemplate] = None,
    palette: Sequence[str] = PALETTE,
) -> str:
    """
    Validate query-style params (ext/extension, textColor, fontSize, bgColor)
    and return the icon SVG.
    """
    request = validate_icon_request(
        ext=params.get("ext"),
        extension=params.get("extension"),
        text_color=params.get("textColor"),
        font_size=params.get("fontSize"),
        bg_color=params.get("bgColor"),
    )
    renderer = FileIconRenderer(template or FileIconTemplate.load(), palette)
    return renderer.render(request)
