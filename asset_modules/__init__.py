"""
Asset Modules.

Domain modules built on the Asset Kernel.  Each module contains:
- Domain models (the nouns)
- Pure helpers (the formulas)
- Workflows (state machines)
- ORM models, selectors and a service
- Configuration schema

Modules:
- Depreciation: calculator, applier, schedule projector, reports
"""
