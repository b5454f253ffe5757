"""Django Offerings - Booking offering configuration engine.

State:
    FormStateStore: Sole owner of the in-progress OfferingDraft
    WizardController: Step-gated seven-step creation wizard
    AutoSaver: Debounced last-write-wins draft persistence

Engine (pure functions):
    validate_step: Per-step validation returning a ValidationResult
    compute_total: Line items, seasonal rates, group tiers and tax
    compute_cancellation_quote, compute_deposit: Policy evaluation

Models:
    OfferingDraftRecord: Autosaved wizard progress
    Offering: Submitted offering (draft, active or scheduled)
"""

__version__ = "0.1.0"

__all__ = [
    # State
    "FormStateStore",
    "WizardController",
    "AutoSaver",
    "OfferingDraft",
    # Engine
    "validate_step",
    "validate_all_steps",
    "compute_total",
    "quote_for_draft",
    "compute_cancellation_quote",
    "compute_deposit",
    "ProductTypeRegistry",
    # Models
    "Offering",
    "OfferingDraftRecord",
]

_LAZY = {
    "FormStateStore": "store",
    "WizardController": "wizard",
    "AutoSaver": "autosave",
    "OfferingDraft": "draft",
    "validate_step": "validators",
    "validate_all_steps": "validators",
    "compute_total": "pricing",
    "quote_for_draft": "pricing",
    "compute_cancellation_quote": "policies",
    "compute_deposit": "policies",
    "ProductTypeRegistry": "registry",
    "Offering": "models",
    "OfferingDraftRecord": "models",
}


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in _LAZY:
        from importlib import import_module

        module = import_module(f".{_LAZY[name]}", __name__)
        return getattr(module, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
