"""Ledger engines: savings, business registry, investment, dividends and stats."""
