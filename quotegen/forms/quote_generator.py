"""
Elcorp Namibia Quotation PDF Generator
=======================================
Single-pass A4 layout on a reportlab canvas:

  header (logo disc / monogram) → identity + date + QT-id → client block
  → line-item table (density tiers) → totals → terms → signature (if room)
  → payment QR (fixed bottom-right) → footer (last page)

Layout math is done in top-origin coordinates (y grows down the page, like
the designer's mockup) and converted with Y() at draw time. Every draw call
is recorded as a DrawOp so tests can assert on the layout without parsing
the PDF.

Nothing in here raises on bad data: missing assets fall back to the
monogram, bad dates become today, no room means the signature block is
left out. Output always goes through a PdfSink session so the sink is ended
even when the canvas blows up halfway.
"""

import os
import logging
from collections import namedtuple
from datetime import date, datetime
from typing import Callable, List, Optional

from dateutil import parser as date_parser
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from quotegen.core.numbers import format_currency, format_number
from quotegen.forms.models import QuotationRequest, QuotationTotals
from quotegen.forms.sink import BufferedPdfSink, PdfSink
from quotegen.forms.totals import totals_for_request, totals_rows

log = logging.getLogger("quotegen.quote_gen")

# ═══════════════════════════════════════════════════════════════════════════════
# COLORS
# ═══════════════════════════════════════════════════════════════════════════════
BLACK      = HexColor("#000000")
WHITE      = HexColor("#FFFFFF")
SLATE      = HexColor("#2C3E50")   # headings, grand total
LINK_BLUE  = HexColor("#1A5FB4")
LOGO_RED   = HexColor("#A94442")
LOGO_GRAY  = HexColor("#5A5A5A")
MID_GRAY   = HexColor("#999999")
RULE_GRAY  = HexColor("#D0D3DC")
FOOT_GRAY  = HexColor("#666666")
FOOT_RULE  = HexColor("#CCCCCC")
HEADER_BG  = HexColor("#F4F4F8")

# ═══════════════════════════════════════════════════════════════════════════════
# COMPANY INFO
# ═══════════════════════════════════════════════════════════════════════════════
COMPANY = {
    "name":           "ELCORP NAMIBIA",
    "monogram":       "E",
    "tagline":        "Professional Business Solutions",
    "phone":          "+264 81 7244041",
    "email":          "elcorpnamibia@gmail.com",
    "website":        "https://elli-portfolio.vercel.app/",
    "representative": "Elcorp Namibia Representative",
    "validity_days":  30,
}

TERMS_LINES = [
    "Prices are quoted in Namibian Dollars (N$) and include the tax shown above.",
    "To accept this quotation, sign below and return a copy with your quotation ID.",
]

# ═══════════════════════════════════════════════════════════════════════════════
# PAGE GEOMETRY (points, top-origin)
# ═══════════════════════════════════════════════════════════════════════════════
PAGE_W, PAGE_H = A4
ML = 40                       # left margin
MT = 40                       # top margin on continuation pages
MR = PAGE_W - 40              # right edge
CW = MR - ML                  # content width

LOGO_R = 45
LOGO_CX = ML + LOGO_R - 5
LOGO_CY = 65

FOOTER_RESERVE = 80           # nothing but footer/QR below PAGE_H - this
FOOTER_MARGIN = 40            # footer rule sits this far above the bottom
SIGNATURE_MIN_SPACE = 80
SIGNATURE_GAP = 28

QR_SIZE = 70
QR_X = MR - QR_SIZE
QR_TOP = PAGE_H - FOOTER_MARGIN - 8 - QR_SIZE
QR_CLEARANCE = 6             # gap kept between content and the QR box

# Item table columns: (x, width); numeric columns are right-aligned in their cell
COL_DESC  = (ML + 10, 190)
COL_QTY   = (250, 60)
COL_PRICE = (310, 80)
COL_TOTAL = (450, 95)
TABLE_HEADER_H = 25

# (max items, row height, font size); the last tier is unbounded
DENSITY_TIERS = (
    (8,    20, 9),
    (15,   16, 8),
    (None, 12, 7),
)

LOGO_NAMES = ("logo.png", "logo.jpg", "logo.jpeg")
PAYMENT_QR_NAMES = ("payment_qr.png", "payment_qr.jpg")

DrawOp = namedtuple("DrawOp", "section kind args")


def density_for(item_count: int):
    """(row_height, font_size) for a table with item_count rows."""
    for limit, row_h, size in DENSITY_TIERS:
        if limit is None or item_count <= limit:
            return row_h, size
    return DENSITY_TIERS[-1][1:]


def resolve_quote_date(raw, today: Optional[Callable[[], date]] = None) -> date:
    """Parse the form's quotation date; anything unusable means today."""
    today = today or date.today
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if raw is None or not str(raw).strip():
        return today()
    try:
        return date_parser.parse(str(raw)).date()
    except (ValueError, OverflowError, TypeError) as e:
        log.debug("Unparseable quotation date %r (%s) — using today", raw, e)
        return today()


def format_long_date(d: date) -> str:
    """March 5, 2024"""
    return f"{d:%B} {d.day}, {d.year}"


def _find_asset(assets_dir: Optional[str], names) -> Optional[str]:
    if not assets_dir:
        return None
    for name in names:
        p = os.path.join(assets_dir, name)
        if os.path.isfile(p):
            return p
    return None


def _wrap_text(text: str, font: str, size: float, width: float,
               max_lines: int = 1) -> List[str]:
    """Wrap text to width, keeping at most max_lines; '...' marks anything cut off."""
    lines = simpleSplit(text, font, size, width)
    if not lines:
        return [""]
    if len(lines) <= max_lines:
        return lines
    kept = lines[:max_lines]
    last = kept[-1]
    while last and stringWidth(last + "...", font, size) > width:
        last = last[:-1]
    kept[-1] = last + "..."
    return kept


def label_lines_for(row_h: float, size: float) -> int:
    """Description lines a table row can hold: two when the row is tall enough."""
    return 2 if row_h >= 2 * (size + 1) else 1


class _Pen:
    """Canvas wrapper: top-origin coordinates + DrawOp recording."""

    def __init__(self, c: canvas.Canvas, page_height: float, bottom: float):
        self.c = c
        self.h = page_height
        self.bottom = bottom          # lowest top-y body content may reach
        self.ops: List[DrawOp] = []
        self.section = ""
        self.page = 1

    def Y(self, top_y):
        return self.h - top_y

    def record(self, kind, *args):
        self.ops.append(DrawOp(self.section, kind, args))

    def text(self, x, top_y, s, font="Helvetica", size=9, color=BLACK, align="left"):
        s = "" if s is None else str(s)
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        if align == "right":
            self.c.drawRightString(x, self.Y(top_y), s)
        elif align == "center":
            self.c.drawCentredString(x, self.Y(top_y), s)
        else:
            self.c.drawString(x, self.Y(top_y), s)
        self.record("text", round(x, 2), round(top_y, 2), s, font, size, align)

    def runs(self, x, top_y, parts, size=9):
        """Consecutive (text, font, color) runs on one baseline."""
        for s, font, color in parts:
            self.text(x, top_y, s, font, size, color)
            x += stringWidth(s, font, size)

    def hline(self, x1, x2, top_y, color, width=1.0):
        self.c.setStrokeColor(color)
        self.c.setLineWidth(width)
        self.c.line(x1, self.Y(top_y), x2, self.Y(top_y))
        self.record("line", round(x1, 2), round(x2, 2), round(top_y, 2))

    def band(self, x, top_y, w, h, color):
        self.c.setFillColor(color)
        self.c.rect(x, self.Y(top_y) - h, w, h, fill=1, stroke=0)
        self.record("rect", round(x, 2), round(top_y, 2), round(w, 2), h)

    def new_page(self):
        self.c.showPage()
        self.page += 1
        self.record("page", self.page)


class QuotePdfRenderer:
    """Draws one quotation. Instances hold configuration only, no per-render state."""

    def __init__(self, assets_dir: Optional[str] = None, company: Optional[dict] = None,
                 signature_min_space: float = SIGNATURE_MIN_SPACE,
                 footer_reserve: float = FOOTER_RESERVE,
                 today: Optional[Callable[[], date]] = None):
        self.assets_dir = assets_dir
        self.company = dict(COMPANY, **(company or {}))
        self.signature_min_space = signature_min_space
        self.footer_reserve = footer_reserve
        self.today = today or date.today

    # ── entry point ───────────────────────────────────────────────────────────

    def render(self, request: QuotationRequest, totals: QuotationTotals,
               quote_id, sink: PdfSink) -> List[DrawOp]:
        """Draw the quotation into sink. Returns the recorded draw operations."""
        log.info("Rendering quotation QT-%s for %s (%d items)",
                 quote_id, request.client_name[:40], len(request.items))
        with sink.session():
            c = canvas.Canvas(sink, pagesize=A4)
            c.setTitle(f"Quotation QT-{quote_id}")
            c.setAuthor(self.company["name"])
            qr_path = _find_asset(self.assets_dir, PAYMENT_QR_NAMES)
            pen = _Pen(c, PAGE_H, self._content_bottom(has_qr=qr_path is not None))

            self._draw_logo(pen)
            self._draw_identity(pen, request, quote_id)
            cursor = self._draw_client(pen, request)
            cursor = self._draw_items(pen, request, cursor)
            cursor = self._draw_totals(pen, totals, cursor)
            cursor = self._draw_terms(pen, cursor)
            self._draw_signature(pen, cursor + SIGNATURE_GAP)
            self._draw_payment_marker(pen, qr_path)
            self._draw_footer(pen)

            c.save()
        log.info("Quotation QT-%s rendered: %d page(s), %d ops",
                 quote_id, pen.page, len(pen.ops))
        return pen.ops

    # ── sections ──────────────────────────────────────────────────────────────

    def _draw_logo(self, pen: _Pen):
        pen.section = "logo"
        c = pen.c
        cx, cy, r = LOGO_CX, pen.Y(LOGO_CY), LOGO_R

        c.setFillColor(LOGO_RED)
        c.circle(cx, cy, r, stroke=0, fill=1)
        c.setFillColor(LOGO_GRAY)
        c.wedge(cx - r, cy - r, cx + r, cy + r, -90, 180, stroke=0, fill=1)
        pen.record("disc", LOGO_CX, LOGO_CY, r)

        logo_path = _find_asset(self.assets_dir, LOGO_NAMES)
        if logo_path:
            try:
                img = ImageReader(logo_path)
                iw, ih = img.getSize()
                box = r * 2
                scale = min(box / iw, box / ih)
                dw, dh = iw * scale, ih * scale
                c.saveState()
                try:
                    clip = c.beginPath()
                    clip.circle(cx, cy, r)
                    c.clipPath(clip, stroke=0, fill=0)
                    c.drawImage(img, cx - dw / 2, cy - dh / 2, width=dw, height=dh,
                                mask="auto")
                finally:
                    c.restoreState()
                pen.record("image", logo_path, round(dw, 2), round(dh, 2))
                return
            except Exception as e:
                log.warning("Logo load failed (%s): %s — using monogram", logo_path, e)

        pen.text(cx, LOGO_CY + 13, self.company["monogram"], "Helvetica-Bold", 36,
                 WHITE, "center")

    def _draw_identity(self, pen: _Pen, request: QuotationRequest, quote_id):
        pen.section = "identity"
        co = self.company
        name_x = ML + LOGO_R * 2

        pen.text(name_x, 62, co["name"], "Helvetica-Bold", 20)
        pen.text(name_x, 80, co["tagline"], "Helvetica-Oblique", 10)
        pen.text(MR, 68, "QUOTATION", "Helvetica-Bold", 24, SLATE, "right")

        pen.runs(ML, 130, [
            ("Phone: ", "Helvetica-Bold", SLATE),
            (co["phone"], "Helvetica", BLACK),
            ("  |  ", "Helvetica", MID_GRAY),
            ("Email: ", "Helvetica-Bold", SLATE),
            (co["email"], "Helvetica", BLACK),
        ])
        pen.runs(ML, 144, [
            ("Website: ", "Helvetica-Bold", SLATE),
            (co["website"], "Helvetica", LINK_BLUE),
        ])

        quote_date = resolve_quote_date(request.quotation_date, self.today)
        pen.text(MR, 144, format_long_date(quote_date), "Helvetica", 9, BLACK, "right")
        pen.text(MR, 156, f"Quotation ID: QT-{quote_id}", "Helvetica-Oblique", 9,
                 BLACK, "right")

        pen.hline(ML, MR, 164, MID_GRAY)

    def _draw_client(self, pen: _Pen, request: QuotationRequest) -> float:
        pen.section = "client"
        top = 182
        pen.text(ML, top + 9, "CLIENT INFORMATION", "Helvetica-Bold", 11, SLATE)
        pen.text(ML, top + 27, f"Name:  {request.client_name}")
        pen.text(ML, top + 42, f"Email:  {request.client_email}")
        pen.text(ML, top + 57, f"Phone:  {request.client_phone}")
        return top + 75

    def _draw_table_header(self, pen: _Pen, top: float) -> float:
        pen.band(ML, top, CW, TABLE_HEADER_H, HEADER_BG)
        base = top + 16
        pen.text(COL_DESC[0], base, "Description", "Helvetica-Bold", 10, SLATE)
        pen.text(COL_QTY[0] + COL_QTY[1], base, "Qty", "Helvetica-Bold", 10, SLATE, "right")
        pen.text(COL_PRICE[0] + COL_PRICE[1], base, "Unit Price", "Helvetica-Bold", 10,
                 SLATE, "right")
        pen.text(COL_TOTAL[0] + COL_TOTAL[1], base, "Total", "Helvetica-Bold", 10,
                 SLATE, "right")
        return top + TABLE_HEADER_H + 5

    def _content_bottom(self, has_qr: bool = False) -> float:
        """Lowest top-y for body content; stays clear of the payment QR when one is drawn."""
        bottom = PAGE_H - self.footer_reserve
        if has_qr:
            bottom = min(bottom, QR_TOP - QR_CLEARANCE)
        return bottom

    def _ensure_space(self, pen: _Pen, cursor: float, needed: float) -> float:
        """Start a new page when needed points don't fit above the content bottom."""
        if cursor + needed <= pen.bottom:
            return cursor
        pen.new_page()
        return MT

    def _draw_items(self, pen: _Pen, request: QuotationRequest, top: float) -> float:
        pen.section = "items"
        row_h, size = density_for(len(request.items))
        max_lines = label_lines_for(row_h, size)
        cursor = self._draw_table_header(pen, top)

        for item in request.items:
            if cursor + row_h > pen.bottom:
                # acceptable overflow past the compact tier: continue on a new page
                pen.new_page()
                cursor = self._draw_table_header(pen, MT)
            base = cursor + size
            for i, line in enumerate(_wrap_text(item.label, "Helvetica", size,
                                                COL_DESC[1], max_lines)):
                pen.text(COL_DESC[0], base + i * (size + 1), line, "Helvetica", size)
            pen.text(COL_QTY[0] + COL_QTY[1], base, format_number(item.quantity),
                     "Helvetica", size, BLACK, "right")
            pen.text(COL_PRICE[0] + COL_PRICE[1], base, format_currency(item.unit_price),
                     "Helvetica", size, BLACK, "right")
            pen.text(COL_TOTAL[0] + COL_TOTAL[1], base, format_currency(item.total),
                     "Helvetica", size, BLACK, "right")
            cursor += row_h

        cursor = self._ensure_space(pen, cursor, 10) + 10
        pen.hline(ML, MR, cursor, RULE_GRAY)
        return cursor + 20

    def _draw_totals(self, pen: _Pen, totals: QuotationTotals, cursor: float) -> float:
        pen.section = "totals"
        rows = totals_rows(totals)
        cursor = self._ensure_space(pen, cursor, 18 * len(rows) + 20)
        label_x = ML + CW / 2 + 10
        value_x = MR - 10

        for label, value, emphasized in rows:
            if emphasized:
                cursor += 4
                pen.hline(label_x, MR, cursor, RULE_GRAY)
                cursor += 10
                pen.text(label_x, cursor + 11, label, "Helvetica-Bold", 11, SLATE)
                pen.text(value_x, cursor + 11, value, "Helvetica-Bold", 11, SLATE, "right")
            else:
                pen.text(label_x, cursor + 10, label, "Helvetica", 10)
                pen.text(value_x, cursor + 10, value, "Helvetica", 10, BLACK, "right")
                cursor += 18
        return cursor

    def _draw_terms(self, pen: _Pen, cursor: float) -> float:
        pen.section = "terms"
        cursor = self._ensure_space(pen, cursor + 24, 11 * len(TERMS_LINES))
        for line in TERMS_LINES:
            pen.text(ML, cursor + 8, line, "Helvetica-Oblique", 8, FOOT_GRAY)
            cursor += 11
        return cursor

    def remaining_space(self, top: float) -> float:
        """Vertical room between top and the footer reserve."""
        return PAGE_H - top - self.footer_reserve

    def _draw_signature(self, pen: _Pen, top: float) -> bool:
        if self.remaining_space(top) < self.signature_min_space:
            log.debug("Signature block omitted: %.0fpt left", self.remaining_space(top))
            return False
        pen.section = "signature"
        pen.text(ML + CW / 2, top + 11, "APPROVAL & SIGNATURE", "Helvetica-Bold", 11,
                 SLATE, "center")
        top += 18
        line_len = 140
        for col_x, title in ((ML + 20, "Customer/Client"),
                             (ML + CW / 2 + 20, self.company["representative"])):
            pen.text(col_x, top + 9, title, "Helvetica-Bold", 9, SLATE)
            pen.hline(col_x, col_x + line_len, top + 20, RULE_GRAY)
            pen.text(col_x, top + 32, "Signature:", "Helvetica-Oblique", 8)
            pen.hline(col_x, col_x + line_len, top + 42, RULE_GRAY)
            pen.text(col_x, top + 54, "Date:", "Helvetica-Oblique", 8)
        return True

    def _draw_payment_marker(self, pen: _Pen, qr_path: Optional[str]):
        if not qr_path:
            return
        pen.section = "payment"
        try:
            pen.c.drawImage(ImageReader(qr_path), QR_X, pen.Y(QR_TOP) - QR_SIZE,
                            width=QR_SIZE, height=QR_SIZE,
                            preserveAspectRatio=True, mask="auto")
            pen.record("image", qr_path, QR_X, QR_TOP)
        except Exception as e:
            log.warning("Payment QR load failed (%s), skipped: %s", qr_path, e)

    def _draw_footer(self, pen: _Pen):
        # The canvas only ever draws on its newest page, so the footer lands on
        # the last page no matter how many pages the table spilled onto.
        pen.section = "footer"
        co = self.company
        foot_y = PAGE_H - FOOTER_MARGIN
        pen.hline(ML, MR, foot_y, FOOT_RULE)
        pen.text(PAGE_W / 2, foot_y + 12,
                 f"Professional Solutions for Your Business | This quotation is valid for "
                 f"{co['validity_days']} days from the date of issue. | "
                 f"Contact: {co['phone']} | {co['email']}",
                 "Helvetica-Oblique", 7, FOOT_GRAY, "center")


# ═══════════════════════════════════════════════════════════════════════════════
# CONVENIENCE WRAPPER
# ═══════════════════════════════════════════════════════════════════════════════

def generate_quotation_pdf(request: QuotationRequest, quote_id,
                           assets_dir: Optional[str] = None,
                           renderer: Optional[QuotePdfRenderer] = None,
                           **renderer_kwargs):
    """Compute totals and render to memory. Returns (pdf_bytes, ops, totals).

    Pass a configured renderer to reuse it; otherwise one is built from
    assets_dir and renderer_kwargs.
    """
    totals = totals_for_request(request)
    sink = BufferedPdfSink()
    if renderer is None:
        renderer = QuotePdfRenderer(assets_dir=assets_dir, **renderer_kwargs)
    ops = renderer.render(request, totals, quote_id, sink)
    return sink.getvalue(), ops, totals
