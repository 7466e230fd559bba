"""Operational scripts: schema migrations and database bootstrap."""
