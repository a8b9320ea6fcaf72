#!/usr/bin/env python3
"""
Elcorp Namibia Quotation Generator — Application Entry Point
Creates the Flask app, wires storage + renderer, registers the quotation Blueprint.
"""

import os
import time
import logging

from flask import Flask, g, request

from logging_config import setup_logging
from quotegen.api.routes import bp, EXTENSION_KEY
from quotegen.core.config import AppConfig
from quotegen.core.quotation_store import QuotationStore
from quotegen.forms.quote_generator import QuotePdfRenderer

log = logging.getLogger("quotegen")


def _log_request_start():
    g.start_time = time.time()


def _log_request_end(response):
    start = g.pop("start_time", None)
    if start is not None and request.path != "/api/health":
        duration_ms = round((time.time() - start) * 1000, 1)
        log.info("%s %s → %d (%.0fms)",
                 request.method, request.path, response.status_code, duration_ms,
                 extra={"route": request.path, "method": request.method,
                        "status": response.status_code, "duration_ms": duration_ms})
    return response


def create_app(config: AppConfig = None, configure_logging: bool = True):
    """Application factory."""
    if configure_logging:
        log_dir = None
        if config is not None:
            log_dir = (os.path.join(config.storage.data_dir, "logs")
                       if config.storage.writable else "")
        setup_logging(log_dir=log_dir)
    cfg = config or AppConfig.from_env()

    app = Flask(__name__)
    app.secret_key = cfg.secret_key

    store = QuotationStore(cfg.storage)
    if store.ensure_storage():
        log.info("Quotations: %s (%d on file)", store.path, store.count())
    else:
        log.warning("Quotations: %s is read-only — saves will not persist", store.path)

    app.extensions[EXTENSION_KEY] = {
        "store": store,
        "renderer": QuotePdfRenderer(assets_dir=cfg.assets_dir),
        "config": cfg,
    }
    app.register_blueprint(bp)

    # ── Request-level structured logging ────────────────────────────────────
    app.before_request(_log_request_start)
    app.after_request(_log_request_end)

    return app


# For gunicorn: gunicorn app:app
app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=app.extensions[EXTENSION_KEY]["config"].port,
            debug=False)
