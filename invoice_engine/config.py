# invoice_engine/config.py

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# --- General Application Configuration ---
# Setting the environment to development by default if not specified
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Seller (company) profile printed in every invoice header ---
COMPANY_NAME = os.getenv("COMPANY_NAME", "AYESHA Coco Pith")
COMPANY_TAGLINE = os.getenv("COMPANY_TAGLINE", "Premium Coir Products")
COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "123 Garden Street, Chennai - 600001")
COMPANY_PHONE = os.getenv("COMPANY_PHONE", "+91 98765 43210")
COMPANY_EMAIL = os.getenv("COMPANY_EMAIL", "info@ayeshacoco.com")

TERMS_AND_CONDITIONS = (
    "1. Payment due within 30 days of the bill date.",
    "2. Goods once sold cannot be returned or exchanged.",
    "3. Subject to Chennai jurisdiction only.",
)

# --- Static assets (logo, icons, currency glyph, signatures) ---
ASSET_DIR = Path(os.getenv("ASSET_DIR", str(Path(__file__).resolve().parent / "assets")))

# --- MinIO S3 Compatible Storage Configuration (PDF archive) ---
MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "localhost:9000") # MinIO server endpoint
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin")
MINIO_SECURE = os.getenv("MINIO_SECURE", "False").lower() == "true" # Use HTTPS if true
MINIO_PDF_BUCKET = os.getenv("MINIO_PDF_BUCKET", "generated-invoices")

# Archive every generated PDF to MinIO (best effort, never blocks a render)
ARCHIVE_PDFS = os.getenv("ARCHIVE_PDFS", "False").lower() == "true"

# --- Simulated product catalog used to autofill invoice lines ---
# Units other than "kg" are count-based and take whole quantities only.
product_db = {
    "coco pith block 5kg": {"name": "Coco Pith Block 5kg", "hsn": "53050040", "unit_price": "250.00", "unit": "piece", "gst_rate": "5"},
    "coco peat loose": {"name": "Coco Peat Loose", "hsn": "53050040", "unit_price": "18.00", "unit": "kg", "gst_rate": "5"},
    "coir fibre": {"name": "Coir Fibre", "hsn": "53050090", "unit_price": "40.00", "unit": "kg", "gst_rate": "5"},
    "grow bag": {"name": "Grow Bag", "hsn": "53050040", "unit_price": "120.00", "unit": "piece", "gst_rate": "12"},
    "coir rope": {"name": "Coir Rope", "hsn": "56074900", "unit_price": "85.00", "unit": "kg", "gst_rate": "12"},
    "coir doormat": {"name": "Coir Doormat", "hsn": "57029990", "unit_price": "350.00", "unit": "piece", "gst_rate": "12"},
    "husk chips": {"name": "Husk Chips", "hsn": "14049090", "unit_price": "30.00", "unit": "kg", "gst_rate": "0"},
}

logger.debug(
    "Configuration loaded: environment=%s, asset_dir=%s, archive=%s, bucket=%s",
    ENVIRONMENT, ASSET_DIR, ARCHIVE_PDFS, MINIO_PDF_BUCKET,
)
