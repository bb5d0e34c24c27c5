"""Páginas: solicitacoes."""

__all__ = []
