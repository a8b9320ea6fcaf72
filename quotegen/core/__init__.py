"""Shared configuration, number handling, and quotation storage.

Modules:
    config           — AppConfig / StorageConfig built from the environment
    numbers          — lenient parsing + N$ currency formatting
    quotation_store  — append-only JSON quotation list
"""
