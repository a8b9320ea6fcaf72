"""
Integration tests for quotegen/api/routes.py via the Flask test client.

Every endpoint the quotation form uses, plus the read-only deployment mode.
"""
import json
import os

import pytest

from quotegen.api import routes
from quotegen.core.config import AppConfig, StorageConfig


def _post(client, url, body):
    return client.post(url, data=json.dumps(body), content_type="application/json")


def _store(app):
    return app.extensions["quotegen"]["store"]


# ═══════════════════════════════════════════════════════════════════════════════
# FORM PAGE + HEALTH
# ═══════════════════════════════════════════════════════════════════════════════

class TestPages:

    def test_form_page(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert r.mimetype == "text/html"
        html = r.get_data(as_text=True)
        assert "ELCORP NAMIBIA" in html
        assert "/api/generate-pdf" in html

    def test_form_previews_with_single_calculate_call(self, client):
        html = client.get("/").get_data(as_text=True)
        assert html.count("fetch('/api/calculate'") == 1
        assert "out.lines[i]" in html

    def test_health(self, client, seed_quotations):
        r = client.get("/api/health")
        assert r.status_code == 200
        data = r.get_json()
        assert data["status"] == "ok"
        assert data["storage"]["durable"] is True
        assert data["storage"]["count"] == 2


# ═══════════════════════════════════════════════════════════════════════════════
# GENERATE PDF
# ═══════════════════════════════════════════════════════════════════════════════

class TestGeneratePdf:

    def test_pdf_response(self, client, sample_quotation):
        r = _post(client, "/api/generate-pdf", sample_quotation)
        assert r.status_code == 200
        assert r.mimetype == "application/pdf"
        assert r.headers["Content-Disposition"] == 'attachment; filename="quotation.pdf"'
        assert r.data.startswith(b"%PDF")

    def test_pdf_request_is_recorded(self, app, client, sample_quotation):
        _post(client, "/api/generate-pdf", sample_quotation)
        records = _store(app).load()
        assert len(records) == 1
        assert records[0]["clientEmail"] == sample_quotation["clientEmail"]

    def test_missing_email_rejected_before_computation(self, app, client,
                                                       sample_quotation, monkeypatch):
        def must_not_run(*a, **kw):
            raise AssertionError("totals computed for an invalid request")

        monkeypatch.setattr(routes, "totals_for_request", must_not_run)
        monkeypatch.setattr(routes, "generate_quotation_pdf", must_not_run)
        del sample_quotation["clientEmail"]
        r = _post(client, "/api/generate-pdf", sample_quotation)
        assert r.status_code == 400
        assert r.get_json() == {"error": "Please enter a valid email address"}
        assert _store(app).count() == 0

    @pytest.mark.parametrize("field,value,message", [
        ("clientName", "", "Please enter client name"),
        ("items", [], "Please add at least one product/service"),
    ])
    def test_validation_errors(self, client, sample_quotation, field, value, message):
        sample_quotation[field] = value
        r = _post(client, "/api/generate-pdf", sample_quotation)
        assert r.status_code == 400
        assert r.get_json()["error"] == message

    def test_non_json_body(self, client):
        r = client.post("/api/generate-pdf", data="clientName=x",
                        content_type="application/x-www-form-urlencoded")
        assert r.status_code == 400
        assert r.get_json()["error"] == "Request body must be a JSON object"

    def test_render_failure_is_500(self, app, client, sample_quotation, monkeypatch):
        renderer = app.extensions["quotegen"]["renderer"]

        def broken_render(*a, **kw):
            raise OSError("stream closed")

        monkeypatch.setattr(renderer, "render", broken_render)
        r = _post(client, "/api/generate-pdf", sample_quotation)
        assert r.status_code == 500
        assert r.get_json() == {"error": "Failed to generate PDF"}

    def test_request_kept_when_render_fails(self, app, client, sample_quotation, monkeypatch):
        renderer = app.extensions["quotegen"]["renderer"]

        def broken_render(*a, **kw):
            raise OSError("stream closed")

        monkeypatch.setattr(renderer, "render", broken_render)
        _post(client, "/api/generate-pdf", sample_quotation)
        assert _store(app).count() == 1

    def test_pdf_prints_stored_id(self, app, client, sample_quotation):
        import io
        import pdfplumber
        r = _post(client, "/api/generate-pdf", sample_quotation)
        stored_id = _store(app).load()[0]["id"]
        with pdfplumber.open(io.BytesIO(r.data)) as pdf:
            text = "\n".join(p.extract_text() or "" for p in pdf.pages)
        assert f"QT-{stored_id}" in text

    def test_unparseable_date_still_renders(self, client, sample_quotation):
        sample_quotation["quotationDate"] = "whenever"
        r = _post(client, "/api/generate-pdf", sample_quotation)
        assert r.status_code == 200
        assert r.data.startswith(b"%PDF")

    def test_logo_asset_used(self, app_config, client, sample_quotation):
        from PIL import Image
        Image.new("RGB", (40, 40), "red").save(os.path.join(app_config.assets_dir, "logo.png"))
        r = _post(client, "/api/generate-pdf", sample_quotation)
        assert r.status_code == 200


# ═══════════════════════════════════════════════════════════════════════════════
# SAVE + LIST
# ═══════════════════════════════════════════════════════════════════════════════

class TestSaveAndList:

    def test_save_quotation(self, client, sample_quotation):
        r = _post(client, "/api/save-quotation", sample_quotation)
        assert r.status_code == 200
        data = r.get_json()
        assert data["success"] is True
        q = data["quotation"]
        assert isinstance(q["id"], int)
        assert q["createdAt"].endswith("Z")
        assert q["clientName"] == "Ndapewa Shilongo"

    def test_save_then_list_and_get(self, client, sample_quotation):
        saved = _post(client, "/api/save-quotation", sample_quotation).get_json()["quotation"]
        listed = client.get("/api/quotations").get_json()
        assert [q["id"] for q in listed] == [saved["id"]]
        one = client.get(f"/api/quotations/{saved['id']}")
        assert one.status_code == 200
        assert one.get_json() == saved

    def test_unknown_id_404(self, client):
        r = client.get("/api/quotations/12345")
        assert r.status_code == 404
        assert "error" in r.get_json()

    def test_save_validation(self, client, sample_quotation):
        del sample_quotation["items"]
        r = _post(client, "/api/save-quotation", sample_quotation)
        assert r.status_code == 400
        assert r.get_json()["error"] == "Please add at least one product/service"

    def test_save_storage_failure_is_500(self, app, client, sample_quotation, monkeypatch):
        def broken_save(payload):
            raise OSError("disk full")

        monkeypatch.setattr(_store(app), "save", broken_save)
        r = _post(client, "/api/save-quotation", sample_quotation)
        assert r.status_code == 500
        assert r.get_json() == {"error": "Failed to save quotation"}

    def test_list_seeded(self, client, seed_quotations):
        r = client.get("/api/quotations")
        assert r.status_code == 200
        assert len(r.get_json()) == 2

    def test_list_empty(self, client):
        assert client.get("/api/quotations").get_json() == []


# ═══════════════════════════════════════════════════════════════════════════════
# CALCULATE (live preview)
# ═══════════════════════════════════════════════════════════════════════════════

class TestCalculate:

    def test_reference_totals(self, client, sample_quotation):
        r = _post(client, "/api/calculate", sample_quotation)
        assert r.status_code == 200
        data = r.get_json()
        assert data["totals"]["grandTotal"] == pytest.approx(143.75)
        assert data["formatted"]["subtotal"] == "N$125.00"
        assert data["formatted"]["taxAmount"] == "N$18.75"
        assert data["formatted"]["grandTotal"] == "N$143.75"
        assert data["formatted"]["discountAmount"] is None

    def test_line_totals_in_one_response(self, client, sample_quotation):
        r = _post(client, "/api/calculate", sample_quotation)
        lines = r.get_json()["lines"]
        assert [line["formatted"] for line in lines] == ["N$100.00", "N$25.00"]
        assert [line["total"] for line in lines] == [pytest.approx(100), pytest.approx(25)]

    def test_line_totals_for_incomplete_rows(self, client):
        r = _post(client, "/api/calculate", {"items": [
            {"quantity": 2, "unitPrice": "7.5"}, {"quantity": "", "unitPrice": 9}]})
        assert [line["formatted"] for line in r.get_json()["lines"]] == ["N$15.00", "N$0.00"]

    def test_discount_preview(self, client):
        r = _post(client, "/api/calculate", {
            "items": [{"quantity": 1, "unitPrice": 200}], "discountPercent": "10"})
        labels = [row["label"] for row in r.get_json()["formatted"]["rows"]]
        assert "Discount (10%):" in labels

    def test_incomplete_form_never_fails(self, client):
        r = _post(client, "/api/calculate", {"items": [{"quantity": "", "unitPrice": "abc"}]})
        assert r.status_code == 200
        assert r.get_json()["formatted"]["grandTotal"] == "N$0.00"

    def test_empty_body(self, client):
        r = client.post("/api/calculate")
        assert r.status_code == 200
        assert r.get_json()["totals"]["taxPercent"] == 15


# ═══════════════════════════════════════════════════════════════════════════════
# READ-ONLY DEPLOYMENT
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def readonly_client(temp_data_dir, assets_dir):
    from app import create_app
    cfg = AppConfig(storage=StorageConfig(data_dir=temp_data_dir, writable=False),
                    assets_dir=assets_dir)
    ro_app = create_app(cfg, configure_logging=False)
    ro_app.config["TESTING"] = True
    with ro_app.test_client() as c:
        yield c


class TestReadOnly:

    def test_save_still_succeeds(self, readonly_client, sample_quotation):
        r = _post(readonly_client, "/api/save-quotation", sample_quotation)
        assert r.status_code == 200
        assert r.get_json()["quotation"]["id"] > 0

    def test_list_is_empty(self, readonly_client, sample_quotation):
        _post(readonly_client, "/api/save-quotation", sample_quotation)
        assert readonly_client.get("/api/quotations").get_json() == []

    def test_pdf_still_generated(self, readonly_client, sample_quotation):
        r = _post(readonly_client, "/api/generate-pdf", sample_quotation)
        assert r.status_code == 200
        assert r.data.startswith(b"%PDF")

    def test_health_degraded(self, readonly_client):
        assert readonly_client.get("/api/health").get_json()["status"] == "degraded"


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT TAX CONFIG
# ═══════════════════════════════════════════════════════════════════════════════

def test_configured_default_tax(temp_data_dir, assets_dir, sample_items):
    from app import create_app
    cfg = AppConfig(storage=StorageConfig(data_dir=temp_data_dir), assets_dir=assets_dir,
                    default_tax_percent=10)
    c = create_app(cfg, configure_logging=False).test_client()
    r = _post(c, "/api/calculate", {"items": sample_items})
    assert r.get_json()["formatted"]["taxAmount"] == "N$12.50"
