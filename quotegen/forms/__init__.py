"""Quotation model, arithmetic, and PDF generation.

Key exports:
    QuotationRequest.from_payload() — form JSON → typed request
    compute_totals()                — subtotal / discount / tax / grand total
    validate_quotation()            — reject unusable requests up front
    QuotePdfRenderer.render()       — draw the A4 quotation into a PdfSink
"""
