# invoice_engine/services/layout_service.py

"""
Lays out one invoice onto A4 pages as a list of draw commands.

The planner never touches a canvas: it produces a RenderedDocument whose
commands carry absolute coordinates, and pdf_service replays them. Layout is
a pure function of the request, its totals and the company profile, so the
same input always yields the same pages.

Block order: header, bill-to/ship-to, line-item table (paged), totals,
amount in words and vehicle number, footer. Every page starts with the page
border and the full company header.
"""

import logging
from collections import namedtuple
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

from invoice_engine.core.money import format_amount, format_quantity, format_signed
from invoice_engine.core.words import to_words
from invoice_engine.models import (
    ChargeSet, CompanyProfile, InvoiceHeader, InvoiceRequest, InvoiceTotals, LineItem, Party, SignatureOptions,
)
from invoice_engine.services.asset_service import signature_asset
from invoice_engine.services.drawing import (
    DARK_FILL, FONT, FONT_BOLD, FONT_ITALIC, MUTED_COLOR, RULE_COLOR, SHADE_FILL, TEXT_COLOR, WHITE, ZEBRA_FILL,
    DrawCommand, ImageRun, Line, Page, Rect, RenderedDocument, TextRun, fit_text, text_width, wrap_text,
)

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
BORDER_INSET = 8 * mm
LEFT = 15 * mm
RIGHT = PAGE_WIDTH - 15 * mm
CONTENT_WIDTH = RIGHT - LEFT
TOP = 14 * mm
PRINTABLE_BOTTOM = PAGE_HEIGHT - 12 * mm

# --- Header ---
LOGO_SIZE = 22 * mm
DOC_BOX_WIDTH = 48 * mm
DOC_BOX_HEIGHT = 20 * mm
DOC_BOX_STRIP = 7 * mm
ICON_SIZE = 3.2 * mm
ICON_GAP = 1.2 * mm
GLYPH_GAP = 0.8 * mm
# company name and address lines stay clear of the logo and the document box
HEADER_TEXT_WIDTH = 2 * min(
    PAGE_WIDTH / 2 - (LEFT + LOGO_SIZE + 3 * mm),
    (RIGHT - DOC_BOX_WIDTH - 3 * mm) - PAGE_WIDTH / 2,
)

# --- Bill To / Ship To ---
PARTY_GUTTER = 5 * mm
PARTY_STRIP_HEIGHT = 6.5 * mm
PARTY_PADDING = 3 * mm
PARTY_WIDTH = (CONTENT_WIDTH - PARTY_GUTTER) / 2

# --- Line-item table ---
TABLE_HEADER_HEIGHT = 8 * mm
ROW_HEIGHT = 7 * mm
CELL_PADDING = 2 * mm
TABLE_FONT_SIZE = 8.5
# a row crossing this line moves to the next page; the rest is kept for totals
TABLE_BREAK_Y = PAGE_HEIGHT - 45 * mm

# --- Totals ---
TOTALS_WIDTH = 80 * mm
TOTALS_ROW_HEIGHT = 6.5 * mm
GRAND_ROW_HEIGHT = 8 * mm
TOTALS_MIN_SPACE = 70 * mm

# --- Footer ---
FOOTER_GAP = 8 * mm
FOOTER_FROM_BOTTOM = 42 * mm
FOOTER_HEIGHT = 27 * mm
SIGNATURE_BLOCK_WIDTH = 55 * mm

Column = namedtuple("Column", "title x width align currency")


def _columns() -> Tuple[Column, ...]:
    layout = [
        ("S.No", 12 * mm, "left", False),
        ("Description", None, "left", False),
        ("HSN", 22 * mm, "left", False),
        ("Qty", 24 * mm, "center", False),
        ("Rate", 28 * mm, "right", True),
        ("Amount", 32 * mm, "right", True),
    ]
    fixed = sum(width for _, width, _, _ in layout if width)
    columns, x = [], LEFT
    for title, width, align, currency in layout:
        width = width or CONTENT_WIDTH - fixed
        columns.append(Column(title, x, width, align, currency))
        x += width
    return tuple(columns)


COLUMNS = _columns()


@dataclass(frozen=True)
class TotalsRow:
    label: str
    value: str
    style: str = "plain"  # plain | shaded | grand


class LayoutCursor:
    """
    The vertical position on the current page plus every page laid out so far.

    Owned by a single layout call and passed explicitly to each block. Starting
    a page always draws the border and the header through `draw_header`.
    """

    def __init__(self, draw_header: Callable[[float], Tuple[List[DrawCommand], float]]):
        self._draw_header = draw_header
        self._pages: List[Page] = []
        self._commands: List[DrawCommand] = []
        self.y = TOP
        self.new_page()

    @property
    def page_number(self) -> int:
        return len(self._pages) + 1

    def new_page(self) -> None:
        if self._commands:
            self._pages.append(Page(self.page_number, tuple(self._commands)))
        header, bottom = self._draw_header(TOP)
        self._commands = [page_border(), *header]
        self.y = bottom

    def emit(self, *commands: DrawCommand) -> None:
        self._commands.extend(commands)

    def fits(self, height: float, limit: float = PRINTABLE_BOTTOM) -> bool:
        return self.y + height <= limit

    def finish(self) -> Tuple[Page, ...]:
        pages = self._pages + [Page(self.page_number, tuple(self._commands))]
        return tuple(pages)


def page_border() -> Rect:
    return Rect(
        BORDER_INSET, BORDER_INSET, PAGE_WIDTH - 2 * BORDER_INSET, PAGE_HEIGHT - 2 * BORDER_INSET,
        stroke=DARK_FILL, line_width=1,
    )


def _icon(x: float, baseline: float, asset: str, size: float = ICON_SIZE) -> ImageRun:
    # sits on the text baseline, slightly below the cap height
    return ImageRun(x, baseline - size * 0.85, size, size, asset)


def _currency_glyph(text_left: float, baseline: float, size: float, asset: str) -> ImageRun:
    width, height = size * 0.55, size * 0.72
    return ImageRun(text_left - GLYPH_GAP - width, baseline - height, width, height, asset)


def _money(right: float, baseline: float, text: str, font: str, size: float, color: str, glyph: str) -> List[DrawCommand]:
    """A right-aligned amount with the currency glyph immediately to its left."""
    left = right - text_width(text, font, size)
    return [_currency_glyph(left, baseline, size, glyph), TextRun(right, baseline, text, font, size, color, "right")]


def _contact_line(center: float, baseline: float, phone: Optional[str], email: Optional[str]) -> List[DrawCommand]:
    commands = []
    if phone:
        text_x = center - 3 * mm - text_width(phone, FONT, 8.5)
        commands += [
            _icon(text_x - ICON_GAP - ICON_SIZE, baseline, "phone"),
            TextRun(text_x, baseline, phone, FONT, 8.5),
        ]
    if email:
        icon_x = center + 3 * mm
        commands += [
            _icon(icon_x, baseline, "email"),
            TextRun(icon_x + ICON_SIZE + ICON_GAP, baseline, email, FONT, 8.5),
        ]
    return commands


def draw_header(company: CompanyProfile, header: InvoiceHeader, title: str, top: float) -> Tuple[List[DrawCommand], float]:
    """
    The company header drawn at the top of every page.

    Returns the commands and the y where the next block may start.
    """
    center = PAGE_WIDTH / 2
    box_x = RIGHT - DOC_BOX_WIDTH
    box_center = box_x + DOC_BOX_WIDTH / 2

    commands: List[DrawCommand] = [
        ImageRun(LEFT, top, LOGO_SIZE, LOGO_SIZE, "logo"),
        Rect(box_x, top, DOC_BOX_WIDTH, DOC_BOX_STRIP, fill=DARK_FILL),
        Rect(box_x, top, DOC_BOX_WIDTH, DOC_BOX_HEIGHT, stroke=DARK_FILL, line_width=0.8),
        TextRun(box_center, top + 4.8 * mm, title, FONT_BOLD, 10, WHITE, "center"),
        TextRun(box_center, top + 12 * mm, f"No: {header.invoice_number}", FONT_BOLD, 8, TEXT_COLOR, "center"),
        TextRun(box_center, top + 16.5 * mm, f"Date: {header.bill_date:%d-%m-%Y}", FONT, 8, TEXT_COLOR, "center"),
    ]

    y = top + 7 * mm
    commands.append(TextRun(center, y, fit_text(company.name, HEADER_TEXT_WIDTH, FONT_BOLD, 18), FONT_BOLD, 18, TEXT_COLOR, "center"))
    for line in (company.tagline, company.address):
        if line:
            y += 4.6 * mm
            commands.append(TextRun(center, y, fit_text(line, HEADER_TEXT_WIDTH, FONT, 9), FONT, 9, MUTED_COLOR, "center"))
    if company.phone or company.email:
        y += 5.5 * mm
        commands.extend(_contact_line(center, y, company.phone, company.email))

    bottom = max(top + LOGO_SIZE, top + DOC_BOX_HEIGHT, y + 2.5 * mm) + 2 * mm
    commands.append(Line(LEFT, bottom, RIGHT, bottom, DARK_FILL, 0.8))
    return commands, bottom + 5 * mm


def _locality(party: Party) -> str:
    locality = ", ".join(part for part in (party.city, party.state) if part)
    if party.postal_code:
        locality = f"{locality} - {party.postal_code}" if locality else party.postal_code
    return locality


def _party_fields(party: Party, x: float, top: float, width: float) -> Tuple[List[DrawCommand], float]:
    """Stacked fields of one party box; empty fields take no space."""
    inner = width - 2 * PARTY_PADDING
    x0 = x + PARTY_PADDING
    y = top
    commands: List[DrawCommand] = []

    if party.shop_name:
        for text in wrap_text(party.shop_name, inner, FONT_BOLD, 11):
            y += 5 * mm
            commands.append(TextRun(x0, y, text, FONT_BOLD, 11))
    if party.name:
        y += 4.4 * mm
        commands.append(TextRun(x0, y, fit_text(party.name, inner, FONT_BOLD, 9), FONT_BOLD, 9))
    for block in (party.address, _locality(party)):
        for text in wrap_text(block or "", inner, FONT, 8.5):
            y += 4 * mm
            commands.append(TextRun(x0, y, text, FONT, 8.5, MUTED_COLOR))
    for value, asset in ((party.phone, "phone"), (party.email, "email")):
        if value:
            y += 4.4 * mm
            commands += [
                _icon(x0, y, asset),
                TextRun(x0 + ICON_SIZE + ICON_GAP, y, fit_text(value, inner - ICON_SIZE - ICON_GAP, FONT, 8.5), FONT, 8.5),
            ]
    if party.gstin:
        label = "GSTIN: "
        label_width = text_width(label, FONT_BOLD, 8.5)
        y += 4.4 * mm
        commands.append(TextRun(x0, y, label, FONT_BOLD, 8.5))
        for i, text in enumerate(wrap_text(party.gstin, inner - label_width, FONT, 8.5)):
            if i:
                y += 4 * mm
            commands.append(TextRun(x0 + label_width, y, text, FONT, 8.5))
    return commands, y


def _draw_parties(cursor: LayoutCursor, bill_to: Party, ship_to: Party) -> None:
    top = cursor.y
    blocks = []
    for title, party, x in (("BILL TO", bill_to, LEFT), ("SHIP TO", ship_to, LEFT + PARTY_WIDTH + PARTY_GUTTER)):
        fields, bottom = _party_fields(party, x, top + PARTY_STRIP_HEIGHT, PARTY_WIDTH)
        blocks.append((title, x, fields, bottom))

    # both boxes share the height of the taller one
    height = max(bottom for _, _, _, bottom in blocks) - top + PARTY_PADDING
    for title, x, fields, _ in blocks:
        cursor.emit(
            Rect(x, top, PARTY_WIDTH, PARTY_STRIP_HEIGHT, fill=SHADE_FILL),
            Rect(x, top, PARTY_WIDTH, height, stroke=RULE_COLOR, line_width=0.8),
            TextRun(x + PARTY_PADDING, top + 4.5 * mm, title, FONT_BOLD, 9, DARK_FILL),
            *fields,
        )
    cursor.y = top + height + 6 * mm


def _cell_x(column: Column) -> float:
    if column.align == "center":
        return column.x + column.width / 2
    if column.align == "right":
        return column.x + column.width - CELL_PADDING
    return column.x + CELL_PADDING


def _shrink_to_fit(text: str, width: float, size: float) -> float:
    """Font size at which an amount fits its cell; amounts are never truncated."""
    natural = text_width(text, FONT, size)
    if natural <= width:
        return size
    return size * width / natural


def _draw_table_header(cursor: LayoutCursor) -> None:
    top = cursor.y
    baseline = top + 5.3 * mm
    cursor.emit(Rect(LEFT, top, CONTENT_WIDTH, TABLE_HEADER_HEIGHT, fill=DARK_FILL))
    for column in COLUMNS:
        x = _cell_x(column)
        cursor.emit(TextRun(x, baseline, column.title, FONT_BOLD, 9, WHITE, column.align))
        if column.currency:
            cursor.emit(_currency_glyph(x - text_width(column.title, FONT_BOLD, 9), baseline, 9, "rupee_light"))
    cursor.y = top + TABLE_HEADER_HEIGHT


def _row_cells(index: int, item: LineItem, total) -> Tuple[str, ...]:
    return (
        str(index + 1),
        item.product_name,
        item.hsn,
        format_quantity(item.quantity, item.unit),
        format_amount(item.unit_price),
        format_amount(total),
    )


def _draw_line_items(cursor: LayoutCursor, items: Sequence[LineItem], totals: InvoiceTotals) -> None:
    _draw_table_header(cursor)
    for index, (item, total) in enumerate(zip(items, totals.line_totals)):
        if not cursor.fits(ROW_HEIGHT, TABLE_BREAK_Y):
            cursor.new_page()
            _draw_table_header(cursor)

        top = cursor.y
        if index % 2:
            cursor.emit(Rect(LEFT, top, CONTENT_WIDTH, ROW_HEIGHT, fill=ZEBRA_FILL))
        baseline = top + 4.7 * mm
        for column, text in zip(COLUMNS, _row_cells(index, item, total)):
            width = column.width - 2 * CELL_PADDING
            size = TABLE_FONT_SIZE
            if column.currency:
                size = _shrink_to_fit(text, width, size)
            else:
                text = fit_text(text, width, FONT, size)
            cursor.emit(TextRun(_cell_x(column), baseline, text, FONT, size, TEXT_COLOR, column.align))
        cursor.y = top + ROW_HEIGHT
        cursor.emit(Line(LEFT, cursor.y, RIGHT, cursor.y, RULE_COLOR, 0.3))


def totals_rows(totals: InvoiceTotals, charges: ChargeSet) -> List[TotalsRow]:
    """
    Rows of the totals panel, top to bottom. Charges appear only when greater
    than zero; SGST/CGST only on GST invoices that carry line items.
    """
    rows = [TotalsRow("Subtotal", format_amount(totals.subtotal), "shaded")]
    for label, amount in (("Transport", charges.transport), ("Packaging", charges.packaging), ("Other Charges", charges.other)):
        if amount > 0:
            rows.append(TotalsRow(label, format_amount(amount)))
    if totals.gst_enabled and totals.line_count:
        rows.append(TotalsRow(f"SGST ({totals.gst_label})", format_amount(totals.sgst_amount)))
        rows.append(TotalsRow(f"CGST ({totals.gst_label})", format_amount(totals.cgst_amount)))
    rows.append(TotalsRow("Round Off", format_signed(totals.round_off)))
    rows.append(TotalsRow("Grand Total", format_amount(totals.rounded_total), "grand"))
    return rows


def _draw_totals(cursor: LayoutCursor, rows: Sequence[TotalsRow]) -> None:
    if not cursor.fits(TOTALS_MIN_SPACE):
        cursor.new_page()
    cursor.y += 4 * mm

    x = RIGHT - TOTALS_WIDTH
    value_right = RIGHT - CELL_PADDING
    for row in rows:
        grand = row.style == "grand"
        height = GRAND_ROW_HEIGHT if grand else TOTALS_ROW_HEIGHT
        size = 11 if grand else 9
        font = FONT_BOLD if row.style != "plain" else FONT
        color = WHITE if grand else TEXT_COLOR
        top = cursor.y
        baseline = top + height / 2 + size * 0.35

        if grand:
            cursor.emit(Rect(x, top, TOTALS_WIDTH, height, fill=DARK_FILL))
        elif row.style == "shaded":
            cursor.emit(Rect(x, top, TOTALS_WIDTH, height, fill=SHADE_FILL))

        value_width = text_width(row.value, font, size) + size + GLYPH_GAP
        label = fit_text(row.label, TOTALS_WIDTH - 2 * CELL_PADDING - value_width, font, size)
        cursor.emit(TextRun(x + CELL_PADDING, baseline, label, font, size, color))
        cursor.emit(*_money(value_right, baseline, row.value, font, size, color, "rupee_light" if grand else "rupee"))

        cursor.y = top + height
        if not grand:
            cursor.emit(Line(x, cursor.y, RIGHT, cursor.y, RULE_COLOR, 0.3))


def _draw_words(cursor: LayoutCursor, totals: InvoiceTotals, lorry_number: Optional[str]) -> None:
    cursor.y += 7 * mm
    sentence = f"Amount in words: {to_words(totals.rounded_total)} only"
    for i, text in enumerate(wrap_text(sentence, CONTENT_WIDTH, FONT_ITALIC, 9)):
        if i:
            cursor.y += 4.5 * mm
        cursor.emit(TextRun(LEFT, cursor.y, text, FONT_ITALIC, 9))
    if lorry_number:
        cursor.y += 5.5 * mm
        cursor.emit(TextRun(LEFT, cursor.y, f"Lorry/Vehicle No: {lorry_number}", FONT_BOLD, 9))


def _footer_top(cursor: LayoutCursor) -> float:
    return max(cursor.y + FOOTER_GAP, PAGE_HEIGHT - FOOTER_FROM_BOTTOM)


def _draw_footer(cursor: LayoutCursor, company: CompanyProfile, signature: SignatureOptions) -> None:
    top = _footer_top(cursor)
    if top + FOOTER_HEIGHT > PRINTABLE_BOTTOM:
        cursor.new_page()
        top = _footer_top(cursor)

    terms_width = CONTENT_WIDTH - SIGNATURE_BLOCK_WIDTH - 5 * mm
    cursor.emit(TextRun(LEFT, top + 4 * mm, "Terms & Conditions:", FONT_BOLD, 9))
    for i, term in enumerate(company.terms[:3]):
        cursor.emit(TextRun(LEFT, top + (8.5 + 4 * i) * mm, fit_text(term, terms_width, FONT, 8), FONT, 8, MUTED_COLOR))

    sig_x = RIGHT - SIGNATURE_BLOCK_WIDTH
    rule_y = top + 20 * mm
    cursor.emit(TextRun(RIGHT, top + 4 * mm, fit_text(f"For {company.name}", SIGNATURE_BLOCK_WIDTH, FONT_BOLD, 9), FONT_BOLD, 9, TEXT_COLOR, "right"))
    if signature.enabled:
        cursor.emit(ImageRun(sig_x + 5 * mm, rule_y - 12 * mm, SIGNATURE_BLOCK_WIDTH - 10 * mm, 11 * mm, signature_asset(signature.signer)))
    cursor.emit(
        Line(sig_x, rule_y, RIGHT, rule_y, TEXT_COLOR, 0.6),
        TextRun(sig_x + SIGNATURE_BLOCK_WIDTH / 2, rule_y + 4.5 * mm, "Authorized Signatory", FONT_BOLD, 8.5, TEXT_COLOR, "center"),
    )
    cursor.y = rule_y + 4.5 * mm


def layout_invoice(request: InvoiceRequest, totals: InvoiceTotals, company: CompanyProfile) -> RenderedDocument:
    """
    Plans every page of the invoice.

    Args:
        request (InvoiceRequest): The invoice to lay out.
        totals (InvoiceTotals): Totals computed from the same request.
        company (CompanyProfile): The seller printed in the header and footer.

    Returns:
        RenderedDocument: Pages of positioned draw commands.
    """
    title = "TAX INVOICE" if request.gst_enabled else "INVOICE"
    cursor = LayoutCursor(partial(draw_header, company, request.header, title))

    _draw_parties(cursor, request.bill_to, request.ship_to)
    _draw_line_items(cursor, request.items, totals)
    _draw_totals(cursor, totals_rows(totals, request.charges))
    _draw_words(cursor, totals, request.header.lorry_number)
    _draw_footer(cursor, company, request.signature)

    pages = cursor.finish()
    logger.debug("Laid out invoice %s on %d page(s)", request.header.invoice_number, len(pages))
    return RenderedDocument(PAGE_WIDTH, PAGE_HEIGHT, pages)
