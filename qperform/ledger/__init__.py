"""
Warning ledger: derives active-warning counts and validates level
progression from an action-log snapshot.

Modules
-------
warning_ledger : WARNING_CONFIGS + compute_expiration() + is_active()
                 + validate_progression() + get_warning_status()
                 — pure functions, no I/O.
"""
