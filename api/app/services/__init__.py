"""Service layer helpers for the API."""
