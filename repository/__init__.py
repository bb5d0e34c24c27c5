"""
Pacote repository
=================

Repositórios do LevaETras. Cada um é dono de uma coleção gravada como
documento JSON no armazenamento chave-valor (`shared.storage`), carregada na
construção e regravada inteira após cada mutação.

Repositórios principais
-----------------------
- FaturasRepository ....... `app_faturas`
- SolicitacoesRepository .. `app_solicitacoes`
- TransacoesRepository .... `app_transactions` (extrato dos pré-pagos)
- ClientesRepository ...... `app_clients`
- EntregadoresRepository .. `app_entregadores`
- SettingsRepository ...... bairros, regiões, métodos/formas de pagamento, usuários, cargos, categorias
"""

from repository.faturas_repository import FaturasRepository
from repository.solicitacoes_repository import SolicitacoesRepository
from repository.transacoes_repository import TransacoesRepository
from repository.clientes_repository import ClientesRepository
from repository.entregadores_repository import EntregadoresRepository
from repository.settings_repository import SettingsRepository

__all__ = [
    "FaturasRepository",
    "SolicitacoesRepository",
    "TransacoesRepository",
    "ClientesRepository",
    "EntregadoresRepository",
    "SettingsRepository",
]
