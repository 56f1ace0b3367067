"""Adapters connecting the reconciliation domain to the outside world."""
