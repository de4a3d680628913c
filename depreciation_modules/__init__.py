"""
Depreciation Modules.

Thin orchestration layers over the depreciation kernel and engines.
Each module contains:
- Domain models (the records)
- Configuration schema (tier, method defaults and rates)
- Service facades (calculation, revaluation)
- Domain events and in-memory collaborators

Modules:
- Assets: depreciation calculation, schedules, forecasts, tax/book, revaluation

Actual calculation logic lives in the engines.
"""
