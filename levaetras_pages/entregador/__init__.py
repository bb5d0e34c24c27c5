"""Páginas: entregador."""

__all__ = []
