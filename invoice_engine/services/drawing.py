# invoice_engine/services/drawing.py

"""
Abstract draw commands produced by the layout planner and replayed by the
PDF renderer. Coordinates are in points, measured from the top-left corner
of the page; text `y` is the baseline.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

TEXT_COLOR = "#1F2933"
MUTED_COLOR = "#52606D"
DARK_FILL = "#2F3E4E"
SHADE_FILL = "#E4E9F0"
ZEBRA_FILL = "#F5F7FA"
RULE_COLOR = "#C3CBD5"
WHITE = "#FFFFFF"


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float
    text: str
    font: str = FONT
    size: float = 9
    color: str = TEXT_COLOR
    align: str = "left"  # left | center | right, relative to x


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    line_width: float = 0.5


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = RULE_COLOR
    width: float = 0.5


@dataclass(frozen=True)
class ImageRun:
    x: float
    y: float
    width: float
    height: float
    asset: str


DrawCommand = Union[TextRun, Rect, Line, ImageRun]


@dataclass(frozen=True)
class Page:
    number: int
    commands: Tuple[DrawCommand, ...]


@dataclass(frozen=True)
class RenderedDocument:
    width: float
    height: float
    pages: Tuple[Page, ...]

    @property
    def page_count(self) -> int:
        return len(self.pages)


def text_width(text: str, font: str = FONT, size: float = 9) -> float:
    return stringWidth(text, font, size)


def wrap_text(text: str, width: float, font: str = FONT, size: float = 9) -> list:
    """Splits text into lines no wider than `width` (long words are not broken). Blank lines are dropped."""
    if not text:
        return []
    return [line for line in simpleSplit(text, font, size, width) if line.strip()]


def fit_text(text: str, width: float, font: str = FONT, size: float = 9) -> str:
    """Truncates text with '...' so it fits into a fixed-width cell."""
    if text_width(text, font, size) <= width:
        return text
    while text and text_width(text + "...", font, size) > width:
        text = text[:-1]
    return text.rstrip() + "..."
