"""Core (UI-agnostic) issue tracker logic.

This package contains:
- CSV parsing and column resolution (sheet export -> Issue records)
- status classification and filter normalization
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
