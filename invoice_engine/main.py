# invoice_engine/main.py

import logging
import os
from io import BytesIO

from fastapi import FastAPI, HTTPException, status
from fastapi.responses import JSONResponse, StreamingResponse

from invoice_engine.config import LOG_LEVEL, product_db
from invoice_engine.core.errors import RenderFailure
from invoice_engine.models import InvoiceDraft, InvoiceRequest, PurchaseDraft, RenderResult, StoredInvoice
from invoice_engine.services.asset_service import get_asset_library
from invoice_engine.services.pdf_service import generate_invoice_pdf
from invoice_engine.services.storage_service import get_pdf_archive
from invoice_engine.services.store_service import invoice_store

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Invoice Engine",
    description="API for creating GST invoices and purchase bills and rendering invoice PDFs.",
    version="0.1.0"
)


# Startup event: load the static images every invoice header needs
@app.on_event("startup")
async def startup_event():
    """
    Loads logo, icon, currency glyph and signature images once. A missing or
    unreadable asset stops the application from starting.
    """
    try:
        get_asset_library()
    except Exception as e:
        logger.critical("Cannot start without invoice assets: %s", e)
        raise
    logger.info("Application startup complete.")


def _invoice_payload(stored: StoredInvoice) -> dict:
    return {
        "id": stored.id,
        "invoice": stored.invoice.model_dump(mode="json"),
        "totals": {**stored.totals.model_dump(mode="json"), "gst_label": stored.totals.gst_label},
        "created_at": stored.created_at.isoformat(),
    }


def _pdf_response(result: RenderResult) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(result.content),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{result.file_name}"'},
    )


def _render(invoice: InvoiceRequest) -> RenderResult:
    try:
        return generate_invoice_pdf(invoice)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RenderFailure as e:
        logger.error("Rendering invoice %s failed: %s", invoice.header.invoice_number, e.cause)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Could not generate the invoice PDF: {e}")


@app.get("/")
async def root():
    """Root endpoint providing a welcome message."""
    return {"message": "Welcome to the Invoice Engine. Visit /docs for API documentation."}


@app.get("/products/", summary="List the product catalog")
async def list_products():
    return list(product_db.values())


@app.post("/invoices/", status_code=status.HTTP_201_CREATED, summary="Create an invoice")
async def create_invoice(draft: InvoiceDraft):
    """
    Assigns the next invoice number, fills missing line details from the
    catalog, computes the totals and stores the invoice.
    """
    try:
        stored = invoice_store.create_invoice(draft)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=_invoice_payload(stored))


@app.get("/invoices/", summary="List stored invoices, newest first")
async def list_invoices():
    return [_invoice_payload(stored) for stored in invoice_store.list_invoices()]


@app.get("/invoices/{invoice_number}", summary="Get one invoice with its totals")
async def get_invoice(invoice_number: str):
    stored = invoice_store.get_invoice(invoice_number)
    if stored is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Invoice '{invoice_number}' not found.")
    return _invoice_payload(stored)


@app.get("/invoices/{invoice_number}/pdf", summary="Download the PDF of a stored invoice")
def download_invoice_pdf(invoice_number: str):
    stored = invoice_store.get_invoice(invoice_number)
    if stored is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Invoice '{invoice_number}' not found.")
    return _pdf_response(_render(stored.invoice))


@app.post("/generate_invoice_pdf/", summary="Render a complete invoice without storing it")
def generate_invoice_pdf_endpoint(invoice: InvoiceRequest):
    """
    Renders an invoice whose number was assigned elsewhere and streams the PDF back.
    """
    return _pdf_response(_render(invoice))


@app.post("/purchases/", status_code=status.HTTP_201_CREATED, summary="Record a purchase bill")
async def create_purchase(draft: PurchaseDraft):
    try:
        stored = invoice_store.create_purchase(draft)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=stored.model_dump(mode="json"))


@app.get("/purchases/pending", summary="Purchase bills with an outstanding credit balance")
async def pending_purchases():
    return [stored.model_dump(mode="json") for stored in invoice_store.pending_purchases()]


@app.get("/download_invoice/{object_name:path}", summary="Download an archived invoice PDF from MinIO")
async def download_archived_invoice(object_name: str):
    """
    Downloads a previously archived PDF by its object name in the PDF bucket.
    """
    try:
        archive = get_pdf_archive()
    except Exception as e:
        logger.error("PDF archive unavailable: %s", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="PDF archive is not available.")

    if not archive.object_exists(object_name):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Invoice PDF '{object_name}' not found in the archive.")

    try:
        content = archive.download_pdf(object_name)
    except FileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    filename_for_download = os.path.basename(object_name)
    return StreamingResponse(
        BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename_for_download}"'},
    )
