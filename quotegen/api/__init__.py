"""HTTP surface: quotation blueprint and the form page."""
