"""
Shared fixtures.

Nothing here talks to Supabase: ``InMemoryStore`` stands in for the remote
store behind a StorageManager, and ``FakeSupabase`` mimics the slice of the
supabase-py query builder the repositories use.
"""

import asyncio
import copy
import itertools
from decimal import Decimal
from types import SimpleNamespace
from typing import Any

import pytest

from cestas.config import get_settings
from cestas.core.text import sanitize_table_name
from cestas.exceptions import NotFoundException
from cestas.modules.tables.cache import CacheManager
from cestas.modules.tables.registry import TablesManager
from cestas.modules.tables.remote import RemoteStore
from cestas.modules.tables.storage import StorageManager
from cestas.observability import get_metrics_store


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


# =============================================================================
# Remote store
# =============================================================================


class InMemoryStore(RemoteStore):
    """
    RemoteStore over plain dicts.

    ``calls`` records every operation as ``(name, args)``. ``fail(op, exc, when)``
    makes ``op`` raise ``exc`` (for calls whose args satisfy ``when``);
    ``delays`` holds seconds to sleep before answering, per operation.
    """

    def __init__(self):
        self.cards: dict[str, dict[str, Any]] = {}
        self.rows: list[dict[str, Any]] = []
        self.calls: list[tuple[str, tuple]] = []
        self.delays: dict[str, float] = {}
        self._failures: dict[str, tuple[Exception, Any]] = {}
        self._ids = itertools.count(1)

    # -- setup helpers --------------------------------------------------------

    def add_card(self, card_id: str, name: str, frete: Any = 0) -> dict[str, Any]:
        card = {
            "id": card_id,
            "name": name,
            "description": None,
            "image_url": None,
            "quantidade_produtos": 0,
            "valor_total": 0,
            "frete": frete,
            "table_name": None,
            "created_at": f"2026-01-0{len(self.cards) + 1}T10:00:00+00:00",
        }
        self.cards[card_id] = card
        return card

    def add_row(self, card_id: str, nome: str, preco: Any, **fields: Any) -> dict[str, Any]:
        row = {
            "id": next(self._ids),
            "id_card": card_id,
            "nome_card": self.cards[card_id]["name"],
            "nome_produto": nome,
            "preco": preco,
            "imagem": None,
            "link": None,
            "categoria": None,
            "descricao": None,
            "importancia": None,
            "ordem": len([r for r in self.rows if r["id_card"] == card_id]),
            **fields,
        }
        self.rows.append(row)
        return row

    def fail(self, operation: str, exc: Exception, when=None) -> None:
        self._failures[operation] = (exc, when)

    def heal(self, operation: str | None = None) -> None:
        if operation is None:
            self._failures.clear()
        else:
            self._failures.pop(operation, None)

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    # -- internals ------------------------------------------------------------

    async def _enter(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        delay = self.delays.get(operation)
        if delay:
            await asyncio.sleep(delay)
        failure = self._failures.get(operation)
        if failure is not None:
            exc, when = failure
            if when is None or when(*args):
                raise exc

    def _row(self, card_id: str, produto_id: str) -> dict[str, Any]:
        for row in self.rows:
            if str(row["id"]) == str(produto_id) and row["id_card"] == card_id:
                return row
        raise NotFoundException("Produto", produto_id, "Produto não encontrado")

    def _card(self, card_id: str) -> dict[str, Any]:
        if card_id not in self.cards:
            raise NotFoundException("Card", card_id, "Card não encontrado")
        return self.cards[card_id]

    # -- RemoteStore ----------------------------------------------------------

    async def fetch_card_by_id(self, card_id: str) -> dict[str, Any]:
        await self._enter("fetch_card_by_id", card_id)
        return dict(self._card(card_id))

    async def fetch_products(self, card_id: str) -> list[dict[str, Any]]:
        await self._enter("fetch_products", card_id)
        rows = [dict(r) for r in self.rows if r["id_card"] == card_id]
        return sorted(rows, key=lambda r: r.get("ordem") or 0)

    async def insert_product(self, card_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        await self._enter("insert_product", card_id, fields)
        name = self._card(card_id)["name"]
        row = {
            "importancia": None,
            **fields,
            "id": next(self._ids),
            "id_card": card_id,
            "nome_card": name,
            "tabela_personalizada": sanitize_table_name(name),
        }
        row.setdefault("ordem", 0)
        self.rows.append(row)
        return dict(row)

    async def update_product(self, card_id: str, produto_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        await self._enter("update_product", card_id, produto_id, fields)
        row = self._row(card_id, produto_id)
        row.update(fields)
        return dict(row)

    async def delete_product(self, card_id: str, produto_id: str) -> None:
        await self._enter("delete_product", card_id, produto_id)
        row = self._row(card_id, produto_id)
        self.rows.remove(row)

    async def set_product_order(self, card_id: str, produto_id: str, position: int) -> None:
        await self._enter("set_product_order", card_id, produto_id, position)
        self._row(card_id, produto_id)["ordem"] = position

    async def fetch_shipping(self, card_id: str) -> Decimal:
        await self._enter("fetch_shipping", card_id)
        return Decimal(str(self._card(card_id).get("frete") or 0))

    async def save_shipping(self, card_id: str, frete: Decimal) -> Decimal:
        await self._enter("save_shipping", card_id, frete)
        self._card(card_id)["frete"] = float(frete)
        return Decimal(str(self._card(card_id)["frete"]))


# =============================================================================
# Card and user repositories
# =============================================================================


class InMemoryCardsRepository:
    """Duck-typed CardsRepository sharing the card dicts of an InMemoryStore."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.list_calls = 0
        self._ids = itertools.count(100)

    async def list_recent(self) -> list[dict[str, Any]]:
        self.list_calls += 1
        cards = sorted(self.store.cards.values(), key=lambda c: c["created_at"], reverse=True)
        return [dict(c) for c in cards]

    async def get_by_id_or_raise(self, card_id: Any) -> dict[str, Any]:
        return dict(self.store._card(str(card_id)))

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        card_id = str(next(self._ids))
        card = {"id": card_id, "created_at": f"2026-02-{len(self.store.cards) + 1:02d}T10:00:00+00:00", **data}
        self.store.cards[card_id] = card
        return dict(card)

    async def update(self, card_id: Any, data: dict[str, Any]) -> dict[str, Any]:
        card = self.store._card(str(card_id))
        card.update(data)
        return dict(card)

    async def delete(self, card_id: Any) -> bool:
        self.store._card(str(card_id))
        del self.store.cards[str(card_id)]
        return True


class InMemoryUsersRepository:
    """Duck-typed UsersRepository over a list of ``usuarios`` rows."""

    def __init__(self, users: list[dict[str, Any]] | None = None):
        self.users = users if users is not None else [
            {
                "id": 7,
                "username": "ana",
                "password": "segredo",
                "display_name": "Ana",
                "tipo_login": "manual",
                "image_url": None,
            },
            {
                "id": 8,
                "username": "bia",
                "password": "",
                "display_name": "Bia",
                "tipo_login": "google",
                "image_url": None,
            },
        ]

    def _user(self, user_id: Any) -> dict[str, Any]:
        for user in self.users:
            if str(user["id"]) == str(user_id):
                return user
        raise NotFoundException("Usuário", user_id, "Usuário não encontrado")

    async def find_manual(self, username: str, password: str) -> dict[str, Any] | None:
        for user in self.users:
            if (
                user["username"] == username
                and user["password"] == password
                and user["tipo_login"] == "manual"
            ):
                return dict(user)
        return None

    async def get_image_url(self, user_id: Any) -> str | None:
        return self._user(user_id).get("image_url")

    async def set_image_url(self, user_id: Any, image_url: str | None) -> None:
        self._user(user_id)["image_url"] = image_url


# =============================================================================
# supabase-py query builder
# =============================================================================


class FakeQuery:
    """Chainable stand-in for a PostgREST request builder over one table."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload: dict[str, Any] | None = None
        self.filters: list[tuple[str, str]] = []
        self.order_by: tuple[str, bool] | None = None
        self.row_limit: int | None = None

    def select(self, *columns: str) -> "FakeQuery":
        self.action = "select"
        return self

    def insert(self, data: dict[str, Any]) -> "FakeQuery":
        self.action, self.payload = "insert", data
        return self

    def update(self, data: dict[str, Any]) -> "FakeQuery":
        self.action, self.payload = "update", data
        return self

    def delete(self) -> "FakeQuery":
        self.action = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, str(value)))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, n: int) -> "FakeQuery":
        self.row_limit = n
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(str(row.get(column)) == value for column, value in self.filters)

    def execute(self) -> SimpleNamespace:
        self.db.executed.append((self.table, self.action))
        if self.db.error is not None:
            raise self.db.error
        rows = self.db.tables.setdefault(self.table, [])

        if self.action == "insert":
            row = {"id": next(self.db.ids), **copy.deepcopy(self.payload)}
            rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        matched = [r for r in rows if self._matches(r)]
        if self.action == "update":
            for r in matched:
                r.update(copy.deepcopy(self.payload))
        elif self.action == "delete":
            for r in matched:
                rows.remove(r)
        else:
            if self.order_by:
                column, desc = self.order_by
                matched.sort(key=lambda r: r.get(column) or 0, reverse=desc)
            if self.row_limit is not None:
                matched = matched[: self.row_limit]
        return SimpleNamespace(data=[dict(r) for r in matched])


class FakeSupabase:
    """Minimal supabase ``Client``: ``table(name)`` returns a fresh query."""

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None):
        self.tables = tables or {}
        self.executed: list[tuple[str, str]] = []
        self.error: Exception | None = None
        self.ids = itertools.count(500)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    get_metrics_store().reset()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryStore:
    """One card ("1", Cesta Básica) with three products and frete 7.00."""
    s = InMemoryStore()
    s.add_card("1", "Cesta Básica", frete=7.0)
    s.add_row("1", "Arroz", 10.0, categoria="Grãos", importancia=3)
    s.add_row("1", "Café", 25.5, categoria="Bebidas", importancia=2)
    s.add_row("1", "Sal", 3.49, categoria="Grãos", importancia=3)
    return s


@pytest.fixture
def cache(clock) -> CacheManager:
    return CacheManager(ttl_ms=60_000, clock=clock)


@pytest.fixture
def storage(store, cache) -> StorageManager:
    return StorageManager("1", store, cache=cache, timeout_seconds=0.5)


@pytest.fixture
def tables(store) -> TablesManager:
    return TablesManager(store)


@pytest.fixture
def cards_repo(store) -> InMemoryCardsRepository:
    return InMemoryCardsRepository(store)


@pytest.fixture
def users_repo() -> InMemoryUsersRepository:
    return InMemoryUsersRepository()


@pytest.fixture
def supabase_db() -> FakeSupabase:
    """Supabase fake holding card 1 with two products."""
    return FakeSupabase(
        {
            "cards": [
                {"id": 1, "name": "Cesta Básica", "frete": 7.0, "quantidade_produtos": 0, "valor_total": 0},
            ],
            "tabelas_card": [
                {"id": 11, "id_card": "1", "nome_produto": "Sal", "preco": 3.49, "ordem": 1},
                {"id": 10, "id_card": "1", "nome_produto": "Arroz", "preco": 10.0, "ordem": 0},
                {"id": 12, "id_card": "2", "nome_produto": "Outro", "preco": 1.0, "ordem": 0},
            ],
        }
    )
