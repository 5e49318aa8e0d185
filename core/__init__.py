"""Core (UI-agnostic) dashboard logic.

This package contains:
- record cleaning (raw JSON rows -> Record -> pandas frame)
- filter normalization and evaluation
- view-model compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
- record sources (JSON file, REST API)
"""
