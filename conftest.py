"""
Shared pytest fixtures for the quotation generator test suite.

IMPORTANT: QUOTEGEN_DATA_DIR is pointed at a throwaway directory BEFORE app.py
is imported, so the module-level `app = create_app()` never touches ./data.
"""
import json
import os
import sys
import tempfile
import pytest

_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

os.environ.setdefault("QUOTEGEN_DATA_DIR", tempfile.mkdtemp(prefix="quotegen-test-"))

from quotegen.core.config import AppConfig, StorageConfig  # noqa: E402
from quotegen.core.quotation_store import QuotationStore  # noqa: E402


# ── Temp data directory (per-test isolation) ──────────────────────────────────

@pytest.fixture
def temp_data_dir(tmp_path):
    """Isolated data dir for the quotation store."""
    data = str(tmp_path / "data")
    os.makedirs(data, exist_ok=True)
    return data


@pytest.fixture
def assets_dir(tmp_path):
    """Empty assets dir: no logo, no payment QR unless a test adds one."""
    d = str(tmp_path / "assets")
    os.makedirs(d, exist_ok=True)
    return d


@pytest.fixture
def storage_config(temp_data_dir):
    return StorageConfig(data_dir=temp_data_dir)


@pytest.fixture
def store(storage_config):
    s = QuotationStore(storage_config)
    s.ensure_storage()
    return s


# ── Flask test client ─────────────────────────────────────────────────────────

@pytest.fixture
def app_config(storage_config, assets_dir):
    return AppConfig(storage=storage_config, assets_dir=assets_dir)


@pytest.fixture
def app(app_config):
    """Create Flask app configured for testing."""
    from app import create_app
    flask_app = create_app(app_config, configure_logging=False)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


# ── Seed helpers ──────────────────────────────────────────────────────────────

def _write_json(path, obj):
    with open(path, "w") as f:
        json.dump(obj, f, default=str)


@pytest.fixture
def seed_quotations(temp_data_dir, sample_quotation):
    """Write two saved quotations to the data dir, return them."""
    records = [
        dict(sample_quotation, id=1718000000000, createdAt="2024-06-10T06:13:20.000Z"),
        dict(sample_quotation, clientName="Namib Mills", id=1718000000500,
             createdAt="2024-06-10T06:13:20.500Z"),
    ]
    _write_json(os.path.join(temp_data_dir, "quotations.json"), records)
    return records


# ── Sample data factories ─────────────────────────────────────────────────────

@pytest.fixture
def sample_items():
    """Two line items: 2 × 50 + 1 × 25 = 125.00 subtotal."""
    return [
        {"name": "Network audit", "description": "On-site, half day",
         "quantity": 2, "unitPrice": 50},
        {"name": "Cable kit", "description": "Cat6, 10m",
         "quantity": 1, "unitPrice": 25},
    ]


@pytest.fixture
def sample_quotation(sample_items):
    """Form payload as the browser posts it."""
    return {
        "clientName": "Ndapewa Shilongo",
        "clientEmail": "ndapewa@example.com.na",
        "clientPhone": "+264 61 123 456",
        "quotationDate": "2024-03-05",
        "items": sample_items,
        "discountPercent": 0,
        "taxPercent": 15,
    }


@pytest.fixture
def many_items():
    """Factory: n identical line items."""
    def _make(n):
        return [{"name": f"Item {i + 1}", "description": "Standard unit",
                 "quantity": 1, "unitPrice": 10} for i in range(n)]
    return _make
