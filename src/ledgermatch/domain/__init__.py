"""Domain layer for ledgermatch."""

# Services import the database layer, which imports domain.entities;
# resolve them lazily to avoid circular dependencies.
_SERVICES = {
    "LedgerService": "ledgermatch.domain.ledger",
    "LedgerReader": "ledgermatch.domain.ledger_reader",
    "MatchWriter": "ledgermatch.domain.match_writer",
    "MultiPassMatcher": "ledgermatch.domain.matcher",
    "ReconciliationService": "ledgermatch.domain.reconciliation",
    "ReconciliationSettingsService": "ledgermatch.domain.settings",
    "RulesService": "ledgermatch.domain.rules",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
