"""Daybook: freelance work-day ledger backend."""
