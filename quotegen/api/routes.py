"""
Quotation API routes.

    GET  /                        quotation form
    GET  /api/health              storage status
    GET  /api/quotations          every saved quotation (JSON array)
    GET  /api/quotations/<id>     one saved quotation
    POST /api/calculate           live totals preview for the form
    POST /api/save-quotation      validate + persist
    POST /api/generate-pdf        validate + persist + render → application/pdf

Services (store, renderer, config) are built by create_app() and looked up
from app.extensions; this module holds no state of its own.
"""

import logging

from flask import Blueprint, Response, current_app, jsonify, request

from quotegen.api.templates import QUOTE_FORM_HTML
from quotegen.core.numbers import format_currency
from quotegen.forms.models import QuotationRequest
from quotegen.forms.quote_generator import generate_quotation_pdf
from quotegen.forms.totals import formatted, totals_for_request
from quotegen.forms.validation import QuotationValidationError, validate_quotation

log = logging.getLogger("quotegen.api")

bp = Blueprint("quotations", __name__)

EXTENSION_KEY = "quotegen"


def _services() -> dict:
    return current_app.extensions[EXTENSION_KEY]


def _payload():
    return request.get_json(silent=True)


@bp.route("/")
def index():
    return Response(QUOTE_FORM_HTML, mimetype="text/html")


@bp.route("/api/health")
def api_health():
    store = _services()["store"]
    return jsonify({
        "status": "ok" if store.durable else "degraded",
        "storage": {"path": store.path, "durable": store.durable,
                    "count": store.count()},
    })


@bp.route("/api/quotations")
def api_quotations():
    return jsonify(_services()["store"].load())


@bp.route("/api/quotations/<int:quote_id>")
def api_quotation(quote_id):
    rec = _services()["store"].get(quote_id)
    if rec is None:
        return jsonify({"error": f"Quotation {quote_id} not found"}), 404
    return jsonify(rec)


@bp.route("/api/calculate", methods=["POST"])
def api_calculate():
    """Totals for whatever the form currently holds. Never 4xx on bad numbers.

    "lines" carries one entry per item, in form order, so the page can fill
    every row total from this single response.
    """
    cfg = _services()["config"]
    quote = QuotationRequest.from_payload(_payload() or {}, cfg.default_tax_percent)
    totals = totals_for_request(quote)
    return jsonify({
        "totals": totals.as_dict(),
        "formatted": formatted(totals),
        "lines": [{"total": item.total, "formatted": format_currency(item.total)}
                  for item in quote.items],
    })


@bp.route("/api/save-quotation", methods=["POST"])
def api_save_quotation():
    payload = _payload()
    try:
        validate_quotation(payload)
    except QuotationValidationError as e:
        log.info("Save rejected: %s", e.message)
        return jsonify({"error": e.message}), 400
    try:
        quotation = _services()["store"].save(payload)
    except Exception as e:
        log.error("Save error: %s", e, exc_info=True)
        return jsonify({"error": "Failed to save quotation"}), 500
    return jsonify({"success": True, "quotation": quotation})


@bp.route("/api/generate-pdf", methods=["POST"])
def api_generate_pdf():
    payload = _payload()
    try:
        validate_quotation(payload)
    except QuotationValidationError as e:
        log.info("PDF request rejected: %s", e.message)
        return jsonify({"error": e.message}), 400

    svc = _services()
    try:
        # Persisted before rendering: the stored id is printed as QT-<id>.
        # A render failure therefore still leaves the request in the log.
        record = svc["store"].save(payload)
        quote = QuotationRequest.from_payload(payload, svc["config"].default_tax_percent)
        pdf, _, _ = generate_quotation_pdf(quote, record["id"], renderer=svc["renderer"])
    except Exception as e:
        log.error("PDF generation error: %s", e, exc_info=True)
        return jsonify({"error": "Failed to generate PDF"}), 500

    resp = Response(pdf, mimetype="application/pdf")
    resp.headers["Content-Disposition"] = 'attachment; filename="quotation.pdf"'
    return resp
