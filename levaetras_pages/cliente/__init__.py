"""Páginas: cliente."""

__all__ = []
