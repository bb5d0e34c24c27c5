"""Páginas: faturas."""

__all__ = []
