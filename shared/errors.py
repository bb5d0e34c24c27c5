"""
Exceções de domínio do LevaETras.

Só violações de regra (`RegraDeNegocioError`) sobem até a UI; registros não
encontrados e valores mal formatados são tratados localmente (no-op / padrão).
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LevaETrasError(Exception):
    """Exceção base da aplicação."""

    def __init__(self, mensagem: str, detalhes: Optional[Dict[str, Any]] = None) -> None:
        self.mensagem = mensagem
        self.detalhes = detalhes or {}
        super().__init__(mensagem)


class RegraDeNegocioError(LevaETrasError, ValueError):
    """Violação de regra de negócio, com mensagem pronta para exibição."""


class TransicaoInvalidaError(RegraDeNegocioError):
    """Mudança de status não permitida pela máquina de estados da solicitação."""

    def __init__(self, status_atual: str, novo_status: str) -> None:
        super().__init__(
            f"Não é possível mudar a solicitação de '{status_atual}' para '{novo_status}'.",
            {"status_atual": status_atual, "novo_status": novo_status},
        )


class JustificativaObrigatoriaError(RegraDeNegocioError):
    """Cancelamento/rejeição sem justificativa."""

    def __init__(self, novo_status: str) -> None:
        super().__init__(
            f"Informe uma justificativa para marcar a solicitação como '{novo_status}'.",
            {"novo_status": novo_status},
        )


class TaxaImutavelError(RegraDeNegocioError):
    """Tentativa de alterar a taxa de uma rota já conciliada."""

    def __init__(self, rota_id: str) -> None:
        super().__init__(
            "A taxa de entrega de uma rota conciliada não pode ser alterada.",
            {"rota_id": rota_id},
        )


class CargoEmUsoError(RegraDeNegocioError):
    """Exclusão de cargo ainda referenciado por usuários."""

    def __init__(self, cargo_id: str) -> None:
        super().__init__(
            "Não é possível remover um cargo que está em uso por um ou mais usuários.",
            {"cargo_id": cargo_id},
        )


__all__ = [
    "LevaETrasError",
    "RegraDeNegocioError",
    "TransicaoInvalidaError",
    "JustificativaObrigatoriaError",
    "TaxaImutavelError",
    "CargoEmUsoError",
]
