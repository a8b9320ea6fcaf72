"""
Elcorp Namibia Quotation Generator

Packages:
    api/        Flask routes and the quotation form page
    forms/      Quotation model, totals, validation, PDF rendering
    core/       Configuration, number formatting, quotation storage
"""
