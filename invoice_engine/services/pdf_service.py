# invoice_engine/services/pdf_service.py

import logging
import unicodedata
from datetime import datetime
from io import BytesIO
from typing import Optional

from reportlab.lib.colors import HexColor
from reportlab.pdfgen import canvas

from invoice_engine.config import (
    ARCHIVE_PDFS, COMPANY_ADDRESS, COMPANY_EMAIL, COMPANY_NAME, COMPANY_PHONE, COMPANY_TAGLINE, TERMS_AND_CONDITIONS,
)
from invoice_engine.core.errors import RenderFailure
from invoice_engine.core.money import compute_invoice_totals
from invoice_engine.models import CompanyProfile, InvoiceRequest, RenderResult
from invoice_engine.services.asset_service import AssetLibrary, get_asset_library
from invoice_engine.services.drawing import DrawCommand, ImageRun, Line, Rect, RenderedDocument, TextRun
from invoice_engine.services.layout_service import layout_invoice
from invoice_engine.services.storage_service import get_pdf_archive

logger = logging.getLogger(__name__)


def default_company_profile() -> CompanyProfile:
    return CompanyProfile(
        name=COMPANY_NAME,
        tagline=COMPANY_TAGLINE,
        address=COMPANY_ADDRESS,
        phone=COMPANY_PHONE,
        email=COMPANY_EMAIL,
        terms=TERMS_AND_CONDITIONS,
    )


def build_file_name(invoice_number: str, generated_at: datetime) -> str:
    """Suggested download name, e.g. 'Invoice-INV-2025-00001-20250101120000.pdf'."""
    return f"Invoice-{invoice_number}-{generated_at.strftime('%Y%m%d%H%M%S')}.pdf"


def _ascii(text: str) -> str:
    return unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")


def _draw(pdf: canvas.Canvas, command: DrawCommand, page_height: float, assets: AssetLibrary, plain: bool) -> None:
    # layout coordinates run top-down, PDF coordinates bottom-up
    if isinstance(command, TextRun):
        text = _ascii(command.text) if plain else command.text
        y = page_height - command.y
        pdf.setFont(command.font, command.size)
        pdf.setFillColor(HexColor(command.color))
        if command.align == "center":
            pdf.drawCentredString(command.x, y, text)
        elif command.align == "right":
            pdf.drawRightString(command.x, y, text)
        else:
            pdf.drawString(command.x, y, text)
    elif isinstance(command, Rect):
        if command.fill:
            pdf.setFillColor(HexColor(command.fill))
        if command.stroke:
            pdf.setStrokeColor(HexColor(command.stroke))
            pdf.setLineWidth(command.line_width)
        pdf.rect(
            command.x, page_height - command.y - command.height, command.width, command.height,
            stroke=int(bool(command.stroke)), fill=int(bool(command.fill)),
        )
    elif isinstance(command, Line):
        pdf.setStrokeColor(HexColor(command.color))
        pdf.setLineWidth(command.width)
        pdf.line(command.x1, page_height - command.y1, command.x2, page_height - command.y2)
    elif isinstance(command, ImageRun):
        pdf.drawImage(
            assets[command.asset], command.x, page_height - command.y - command.height,
            width=command.width, height=command.height, preserveAspectRatio=True, anchor="c",
        )
    else:
        raise TypeError(f"Unknown draw command: {command!r}")


def render_document(document: RenderedDocument, assets: AssetLibrary, title: Optional[str] = None, plain: bool = False) -> bytes:
    """
    Replays a laid-out document onto a reportlab canvas.

    Args:
        document (RenderedDocument): Pages of draw commands from the layout engine.
        assets (AssetLibrary): Decoded images referenced by ImageRun commands.
        title (str, optional): PDF metadata title.
        plain (bool): Fallback mode; uncompressed output and text folded to ASCII.

    Returns:
        bytes: The complete PDF.
    """
    buffer = BytesIO()
    pdf = canvas.Canvas(
        buffer,
        pagesize=(document.width, document.height),
        pageCompression=0 if plain else 1,
        invariant=1,
    )
    if title:
        pdf.setTitle(title)

    for page in document.pages:
        for command in page.commands:
            _draw(pdf, command, document.height, assets, plain)
        pdf.showPage()
    pdf.save()

    content = buffer.getvalue()
    if not content.startswith(b"%PDF-"):
        raise ValueError("Renderer produced no PDF header")
    return content


def emit_pdf(document: RenderedDocument, assets: AssetLibrary, title: Optional[str] = None) -> bytes:
    """
    Renders the document, retrying once in plain mode if the primary path fails.

    Raises:
        RenderFailure: if the fallback fails too; the fallback's error is the cause.
    """
    try:
        return render_document(document, assets, title=title)
    except Exception as e:
        logger.warning("Primary PDF emission failed (%s); retrying with the plain fallback.", e)

    try:
        return render_document(document, assets, title=title, plain=True)
    except Exception as e:
        logger.error("Fallback PDF emission failed: %s", e)
        raise RenderFailure(f"Failed to generate PDF: {e}", cause=e) from e


def _archive(file_name: str, content: bytes) -> Optional[str]:
    """Best-effort upload to the PDF archive; a failure is logged and ignored."""
    try:
        return get_pdf_archive().upload_pdf(file_name, content)
    except Exception as e:
        logger.warning("Could not archive %s: %s", file_name, e)
        return None


def generate_invoice_pdf(
    invoice: InvoiceRequest,
    assets: Optional[AssetLibrary] = None,
    company: Optional[CompanyProfile] = None,
    generated_at: Optional[datetime] = None,
    archive: Optional[bool] = None,
) -> RenderResult:
    """
    Computes the totals, lays out and renders one invoice.

    Args:
        invoice (InvoiceRequest): The complete invoice to render.
        assets (AssetLibrary, optional): Defaults to the process-wide library.
        company (CompanyProfile, optional): Defaults to the configured seller.
        generated_at (datetime, optional): Timestamp used in the file name; defaults to now.
        archive (bool, optional): Upload the PDF to MinIO; defaults to ARCHIVE_PDFS.

    Returns:
        RenderResult: The PDF bytes, the suggested file name and the page count.

    Raises:
        InvalidAmount: if any quantity, price, rate or charge is invalid.
        RenderFailure: if neither emission path produced a PDF.
    """
    totals = compute_invoice_totals(invoice.items, invoice.charges, invoice.gst_enabled)
    company = company or default_company_profile()
    assets = assets or get_asset_library()
    generated_at = generated_at or datetime.now()

    invoice_number = invoice.header.invoice_number
    file_name = build_file_name(invoice_number, generated_at)
    document = layout_invoice(invoice, totals, company)
    content = emit_pdf(document, assets, title=f"Invoice {invoice_number}")

    archived_as = None
    if ARCHIVE_PDFS if archive is None else archive:
        archived_as = _archive(file_name, content)

    logger.info("Generated %s (%d page(s), %d bytes)", file_name, document.page_count, len(content))
    return RenderResult(
        file_name=file_name,
        content=content,
        success=True,
        page_count=document.page_count,
        archived_as=archived_as,
    )
