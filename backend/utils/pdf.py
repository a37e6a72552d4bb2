# backend/utils/pdf.py
import logging
import re
from pathlib import Path
from typing import Optional

from config import settings
from schemas.invoice import InvoiceDocument
from services.errors import ExportUnavailable

logger = logging.getLogger(__name__)

# Path configuration
STORAGE_DIR = Path(settings.INVOICE_DIR)
FONT_DIR = Path("assets/fonts")
FONT_REGULAR_PATH = FONT_DIR / "DejaVuSans.ttf"
FONT_BOLD_PATH = FONT_DIR / "DejaVuSans-Bold.ttf"

# Built-in Type 1 fonts, replaced by DejaVu when the TTF files are present
FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

def ensure_storage_dir(storage_dir: Path = STORAGE_DIR) -> None:
    storage_dir.mkdir(parents=True, exist_ok=True)

def _safe_part(value: str) -> str:
    # Whitespace runs, path separators and anything else outside [A-Za-z0-9._-] become "_"
    return re.sub(r"[^A-Za-z0-9._-]", "_", re.sub(r"\s+", "_", value))

def invoice_filename(bill_number: str, client_name: str) -> str:
    """File name of an invoice: bill number plus client name with whitespace runs as underscores."""
    return f"{_safe_part(bill_number)}_{_safe_part(client_name)}.pdf"

def get_pdf_path(document: InvoiceDocument, storage_dir: Optional[Path] = None) -> Path:
    """Returns the PDF path for the given invoice."""
    storage_dir = storage_dir or STORAGE_DIR
    ensure_storage_dir(storage_dir)
    path = storage_dir / invoice_filename(document.bill_number, document.client.name)
    if path.resolve().parent != storage_dir.resolve():
        raise ValueError(f"Invoice path {path} is outside {storage_dir}")
    return path

_fonts_inited = False
def _init_fonts():
    """Registers DejaVu fonts in ReportLab when they ship with the app."""
    global _fonts_inited, FONT_REGULAR_NAME, FONT_BOLD_NAME
    if _fonts_inited:
        return
    _fonts_inited = True

    if not FONT_REGULAR_PATH.exists():
        logger.debug("Font file not found at %s, using Helvetica", FONT_REGULAR_PATH)
        return

    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    pdfmetrics.registerFont(TTFont("DejaVuSans", str(FONT_REGULAR_PATH)))
    FONT_REGULAR_NAME = "DejaVuSans"
    if FONT_BOLD_PATH.exists():
        pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", str(FONT_BOLD_PATH)))
        FONT_BOLD_NAME = "DejaVuSans-Bold"
    else:
        FONT_BOLD_NAME = FONT_REGULAR_NAME

def _money(value: float) -> str:
    return f"INR {value:,.2f}"

def _qty(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else f"{value:g}"

def generate_invoice_pdf(document: InvoiceDocument, out_path: Path) -> Path:
    """
    Renders a single-line tax invoice:
    - Header (company name, "TAX INVOICE")
    - Bill number and date
    - Bill To block
    - Item table
    - Total, signatory line and footer
    """
    try:
        from reportlab.lib.pagesizes import A4
        from reportlab.pdfgen import canvas
        from reportlab.lib.units import mm
    except ImportError:
        raise ExportUnavailable("reportlab is not installed. Run: python -m pip install reportlab")

    _init_fonts()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, height = A4

    # Text drawing helper
    def draw_text(x, y, text, font=None, size=10, align="left", color=(0, 0, 0)):
        c.setFillColorRGB(*color)
        c.setFont(font or FONT_REGULAR_NAME, size)
        text_str = str(text) if text is not None else ""
        if align == "right":
            c.drawRightString(x, y, text_str)
        elif align == "center":
            c.drawCentredString(x, y, text_str)
        else:
            c.drawString(x, y, text_str)
        c.setFillColorRGB(0, 0, 0)

    # --- 1. HEADER ---
    y = height - 20 * mm
    draw_text(105 * mm, y, document.company_name, font=FONT_BOLD_NAME, size=22, align="center", color=(0.16, 0.16, 0.16))
    y -= 8 * mm
    draw_text(105 * mm, y, "TAX INVOICE", size=10, align="center", color=(0.4, 0.4, 0.4))

    y -= 7 * mm
    c.setStrokeColorRGB(0.8, 0.8, 0.8)
    c.setLineWidth(0.5)
    c.line(20 * mm, y, 190 * mm, y)
    c.setStrokeColorRGB(0, 0, 0)

    # --- 2. BILL INFO ---
    y -= 10 * mm
    draw_text(20 * mm, y, f"Bill No: {document.bill_number}", size=11)
    draw_text(190 * mm, y, f"Date: {document.date}", size=11, align="right")

    # --- 3. BILL TO ---
    y -= 15 * mm
    draw_text(20 * mm, y, "Bill To:", font=FONT_BOLD_NAME, size=11)
    y -= 7 * mm
    draw_text(20 * mm, y, document.client.name, size=11)
    y -= 7 * mm
    draw_text(20 * mm, y, f"Phone: {document.client.phone}", size=11)
    y -= 7 * mm
    addr = f"Address: {document.client.address}"
    draw_text(20 * mm, y, addr[:60], size=11)
    if len(addr) > 60:
        y -= 5 * mm
        draw_text(20 * mm, y, addr[60:120], size=11)

    # --- 4. ITEM TABLE ---
    y -= 14 * mm
    c.setFillColorRGB(0.16, 0.16, 0.16)
    c.rect(20 * mm, y - 2 * mm, 170 * mm, 8 * mm, fill=1, stroke=0)
    c.setFillColorRGB(1, 1, 1)
    c.setFont(FONT_BOLD_NAME, 9)
    c.drawString(22 * mm, y, "Product Description")
    c.drawRightString(115 * mm, y, "Quantity")
    c.drawRightString(150 * mm, y, "Unit Price")
    c.drawRightString(188 * mm, y, "Amount")
    c.setFillColorRGB(0, 0, 0)

    y -= 8 * mm
    line = document.product
    c.setFillColorRGB(0.96, 0.96, 0.96)
    c.rect(20 * mm, y - 2 * mm, 170 * mm, 8 * mm, fill=1, stroke=0)
    c.setFillColorRGB(0, 0, 0)
    c.setFont(FONT_REGULAR_NAME, 9)
    c.drawString(22 * mm, y, str(line.name)[:45])
    c.drawRightString(115 * mm, y, f"{_qty(line.quantity)} {line.unit}")
    c.drawRightString(150 * mm, y, _money(line.rate))
    c.drawRightString(188 * mm, y, _money(line.total))

    # --- 5. SUMMARY ---
    y -= 20 * mm
    draw_text(190 * mm, y, f"Total Amount: {_money(line.total)}", font=FONT_BOLD_NAME, size=12, align="right")

    # --- 6. SIGNATURE ---
    y -= 25 * mm
    c.setLineWidth(0.5)
    c.line(140 * mm, y, 190 * mm, y)
    y -= 5 * mm
    draw_text(190 * mm, y, "Authorized Signatory", size=10, align="right")

    # --- 7. FOOTER ---
    draw_text(105 * mm, 12 * mm, "Computer generated invoice. No signature required.", size=9, align="center", color=(0.6, 0.6, 0.6))

    c.showPage()
    c.save()
    return out_path

def save_invoice_document(event) -> Path:
    """Listener for InvoiceRequested: writes the invoice PDF to the invoice storage."""
    out_path = get_pdf_path(event.document)
    generate_invoice_pdf(event.document, out_path)
    logger.info("Invoice %s written to %s", event.document.bill_number, out_path)
    return out_path
