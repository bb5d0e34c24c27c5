"""Testes do armazenamento chave-valor e da coleção base."""

from datetime import datetime

from repository.faturas_repository import FaturasRepository
from repository.solicitacoes_repository import SolicitacoesRepository
from shared.storage import MemoryKeyValueStore, SQLiteKeyValueStore, load_from_storage, save_to_storage


def test_memoria_ida_e_volta_com_datas():
    store = MemoryKeyValueStore()
    assert save_to_storage(store, "chave", {"quando": datetime(2025, 6, 1, 10, 30), "valor": 1.5})
    assert load_from_storage(store, "chave", None) == {"quando": "2025-06-01T10:30:00", "valor": 1.5}


def test_chave_ausente_e_json_invalido_usam_padrao():
    store = MemoryKeyValueStore({"quebrada": "{nao-e-json"})
    assert load_from_storage(store, "inexistente", []) == []
    assert load_from_storage(store, "quebrada", {"ok": True}) == {"ok": True}


def test_parse_com_erro_usa_padrao():
    store = MemoryKeyValueStore({"n": '"abc"'})
    assert load_from_storage(store, "n", 0, parse=int) == 0


def test_sqlite_persiste_entre_instancias(tmp_path):
    caminho = tmp_path / "levaetras.db"
    save_to_storage(SQLiteKeyValueStore(caminho), "app_teste", [1, 2, 3])
    outra = SQLiteKeyValueStore(caminho)
    assert load_from_storage(outra, "app_teste", []) == [1, 2, 3]

    save_to_storage(outra, "app_teste", [4])
    assert load_from_storage(SQLiteKeyValueStore(caminho), "app_teste", []) == [4]

    outra.delete("app_teste")
    assert outra.get("app_teste") is None


def test_colecao_que_nao_e_lista_usa_padrao():
    store = MemoryKeyValueStore({"app_faturas": '{"id": "x"}'})
    assert FaturasRepository(store).itens == []


def test_registro_invalido_e_descartado():
    store = MemoryKeyValueStore({"app_faturas": '[{"id": "f1", "numero": "FAT-2025-0001"}, 42]'})
    repo = FaturasRepository(store)
    assert [f.id for f in repo.itens] == ["f1"]


def test_atualizar_e_remover_id_inexistente_sao_no_op():
    repo = FaturasRepository(MemoryKeyValueStore())
    antes = repo.itens
    assert repo.atualizar("nao-existe", lambda f: f) is None
    assert repo.remover("nao-existe") is False
    assert repo.itens is antes


def test_rotas_sem_id_recebem_id_ao_carregar():
    store = MemoryKeyValueStore(
        {"app_solicitacoes": '[{"id": "s1", "codigo": "SOL-1001", "rotas": [{"bairroDestinoId": "bairro-se"}]}]'}
    )
    sol = SolicitacoesRepository(store).obter("s1")
    assert sol.rotas[0].id
