"""Core (UI-agnostic) session evaluation dashboard logic.

This package contains:
- data loading and record normalization (CSV/JSON/XLSX -> pandas)
- filter normalization and evaluation
- aggregations shared by every page
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
- per-view controllers
"""
