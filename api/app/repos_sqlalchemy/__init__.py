"""SQLAlchemy-backed repository implementations.

Each module exposes plain async functions taking an ``AsyncSession`` as their
first argument. Lookups of a missing row raise
:class:`~api.app.domain.errors.NotFound`.
"""
