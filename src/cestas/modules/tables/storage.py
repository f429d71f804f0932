"""
Cestas Tables - Storage Manager.

Owns the in-memory replica of one card: its products, shipping value and
name. Every read and write of that card goes through here.

Public operations never raise. Remote and unexpected errors are logged and
returned as ``Failure``; successful mutations patch the replica with the
canonical record the store returned and invalidate the cache.

Mutations on the same card are serialized by a lock so at most one is in
flight at a time; responses therefore apply in submission order.
"""

import asyncio
import logging
from collections.abc import Awaitable
from decimal import Decimal
from typing import Any, TypeVar

from cestas.config import get_settings
from cestas.core.result import Failure, Result, Success
from cestas.exceptions import CestasException, NotFoundException, RemoteTimeoutException
from cestas.modules.tables.cache import CacheManager
from cestas.modules.tables.filters import apply_order, sum_precos
from cestas.modules.tables.remote import RemoteStore
from cestas.modules.tables.schemas import Estatisticas, Produto, ProdutoInput, ReorderReport
from cestas.modules.tables.validation import parse_money

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageManager:
    """Replica and cache of a single card's product table."""

    def __init__(
        self,
        card_id: str,
        store: RemoteStore,
        cache: CacheManager | None = None,
        timeout_seconds: float | None = None,
    ):
        settings = get_settings()
        self.card_id = str(card_id)
        self.store = store
        self.cache = cache or CacheManager(ttl_ms=settings.cache.ttl_ms)
        self.timeout_seconds = timeout_seconds or settings.remote.timeout_seconds

        self.card_name = ""
        self.produtos: list[Produto] = []
        self.frete = Decimal("0")
        self.initialized = False
        self.card_missing = False
        self._produtos_loaded = False

        self._init_lock = asyncio.Lock()
        self._mutation_lock = asyncio.Lock()

        logger.info(f"StorageManager created for card {self.card_id}")

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def init(self) -> None:
        """
        Load card name, products and shipping concurrently.

        Each load fails independently and leaves its field at the safe
        default. ``initialized`` is set even after partial failure.
        """
        async with self._init_lock:
            if self.initialized:
                return
            logger.info(f"Initializing StorageManager for card {self.card_id}")
            results = await asyncio.gather(
                self._load_card_info(),
                self._load_from_remote(),
                self._load_frete(),
                return_exceptions=True,
            )
            for label, outcome in zip(("card_info", "produtos", "frete"), results):
                if isinstance(outcome, BaseException):
                    logger.warning(f"Card {self.card_id}: loading {label} failed: {outcome}")
            self.card_missing = isinstance(results[0], NotFoundException)
            self.initialized = True
            logger.info(
                f"StorageManager ready for card {self.card_id} "
                f"[{len(self.produtos)} produtos, frete={self.frete}]"
            )

    async def recarregar(self) -> None:
        """Hard reset: drop the cache and reload everything from the store."""
        self.cache.clear()
        self.initialized = False
        self._produtos_loaded = False
        await self.init()

    async def _load_card_info(self) -> None:
        cached = self.cache.get("card_info")
        if cached is not None:
            self.card_name = cached
            return
        card = await self._remote("fetch_card_by_id", self.store.fetch_card_by_id(self.card_id))
        self.card_name = card.get("name") or ""
        self.cache.set("card_info", self.card_name)

    async def _load_from_remote(self) -> None:
        cached = self.cache.get("produtos")
        if cached is not None:
            self.produtos = list(cached)
            self._produtos_loaded = True
            logger.debug(f"Card {self.card_id}: using {len(self.produtos)} cached produtos")
            return
        try:
            rows = await self._remote("fetch_products", self.store.fetch_products(self.card_id))
        except Exception:
            self.produtos = []
            self._produtos_loaded = False
            raise
        self.produtos = [Produto.from_row(row) for row in rows]
        self._produtos_loaded = True
        self.cache.set("produtos", list(self.produtos))
        logger.info(f"Card {self.card_id}: {len(self.produtos)} produtos loaded")

    async def _load_frete(self) -> None:
        cached = self.cache.get("frete")
        if cached is not None:
            self.frete = cached
            return
        try:
            frete = await self._remote("fetch_shipping", self.store.fetch_shipping(self.card_id))
        except Exception:
            self.frete = Decimal("0")
            raise
        self.frete = Decimal(str(frete))
        self.cache.set("frete", self.frete)

    async def load_produtos(self) -> Result[list[Produto]]:
        """Return a copy of the replica sorted by ``ordem``; load it first if not initialized."""
        try:
            if not self.initialized:
                await self._load_from_remote()
            self.produtos.sort(key=lambda p: p.ordem)
            return Success(list(self.produtos))
        except Exception as e:
            logger.error(f"Card {self.card_id}: loading produtos failed: {e}")
            return Failure(_message(e), details=[])

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def adicionar_produto(self, data: ProdutoInput) -> Result[Produto]:
        """Insert a product and append the canonical record to the replica."""
        async with self._mutation_lock:
            try:
                row = await self._remote(
                    "insert_product", self.store.insert_product(self.card_id, data.to_row())
                )
                produto = Produto.from_row(row)
                self.produtos.append(produto)
                self.cache.invalidate()
                logger.info(f"Card {self.card_id}: produto {produto.id} added")
                return Success(produto)
            except Exception as e:
                return self._failure("adicionar_produto", e)

    async def atualizar_produto(self, produto_id: str, data: ProdutoInput) -> Result[Produto]:
        """Update a product and replace its replica entry in place."""
        produto_id = str(produto_id)
        async with self._mutation_lock:
            try:
                row = await self._remote(
                    "update_product",
                    self.store.update_product(self.card_id, produto_id, data.to_row(partial=True)),
                )
                produto = Produto.from_row(row)
                index = self._index_of(produto_id)
                if index is None:
                    logger.warning(
                        f"Card {self.card_id}: updated produto {produto_id} is not in the replica"
                    )
                else:
                    self.produtos[index] = produto
                self.cache.invalidate()
                return Success(produto)
            except Exception as e:
                return self._failure("atualizar_produto", e)

    async def remover_produto(self, produto_id: str) -> Result[None]:
        """Delete a product and drop it from the replica."""
        produto_id = str(produto_id)
        async with self._mutation_lock:
            try:
                await self._remote("delete_product", self.store.delete_product(self.card_id, produto_id))
                self.produtos = [p for p in self.produtos if p.id != produto_id]
                self.cache.invalidate()
                logger.info(f"Card {self.card_id}: produto {produto_id} removed")
                return Success(None)
            except Exception as e:
                return self._failure("remover_produto", e)

    async def reordenar_produtos(self, ordered_ids: list[str]) -> Result[ReorderReport]:
        """
        Persist a new display order, one position write per product.

        The replica takes the new order immediately. Repeated or unknown ids
        in ``ordered_ids`` are ignored and products left out keep their
        relative order at the end; positions are written from the resulting
        replica. Writes are independent: a failed one does not stop the
        others, and the returned report lists which positions still need to
        be written.
        """
        ordered_ids = [str(i) for i in ordered_ids]
        async with self._mutation_lock:
            self.produtos = apply_order(self.produtos, ordered_ids)
            report = await self._persist_positions({p.id: p.ordem for p in self.produtos})
            self.cache.invalidate()
        return self._reorder_result(report)

    async def retry_reordenacao(self, report: ReorderReport) -> Result[ReorderReport]:
        """Re-send only the positions that failed in ``report``."""
        async with self._mutation_lock:
            retried = await self._persist_positions(dict(report.failed))
            self.cache.invalidate()
        retried.succeeded = report.succeeded + retried.succeeded
        return self._reorder_result(retried)

    async def _persist_positions(self, positions: dict[str, int]) -> ReorderReport:
        report = ReorderReport()
        for produto_id, position in positions.items():
            try:
                await self._remote(
                    "set_product_order",
                    self.store.set_product_order(self.card_id, produto_id, position),
                )
                report.succeeded.append(produto_id)
            except Exception as e:
                report.failed[produto_id] = position
                report.errors[produto_id] = _message(e)
        return report

    def _reorder_result(self, report: ReorderReport) -> Result[ReorderReport]:
        if report.complete:
            logger.info(f"Card {self.card_id}: order of {len(report.succeeded)} produtos saved")
            return Success(report)
        logger.warning(
            f"Card {self.card_id}: reorder incomplete, {len(report.failed)} positions not saved"
        )
        return Failure("Erro ao reordenar produtos", details=report)

    async def salvar_frete(self, valor: Any) -> Result[Decimal]:
        """Validate and persist the shipping value; update replica and cache on success."""
        async with self._mutation_lock:
            try:
                frete = parse_money(valor, "Frete")
                saved = await self._remote("save_shipping", self.store.save_shipping(self.card_id, frete))
                self.frete = Decimal(str(saved))
                # the shared stamp also revives the other slots: rewrite them from the
                # replica, or empty them when that slice was never loaded
                self.cache.set("produtos", list(self.produtos) if self._produtos_loaded else None)
                self.cache.set("card_info", self.card_name or None)
                self.cache.set("frete", self.frete)
                logger.info(f"Card {self.card_id}: frete saved R$ {self.frete:.2f}")
                return Success(self.frete)
            except Exception as e:
                return self._failure("salvar_frete", e)

    # -------------------------------------------------------------------------
    # Pure reads
    # -------------------------------------------------------------------------

    def get_frete(self) -> Decimal:
        return self.frete

    def get_produto_by_id(self, produto_id: str) -> Produto | None:
        index = self._index_of(str(produto_id))
        return self.produtos[index] if index is not None else None

    def get_estatisticas(self) -> Estatisticas:
        categorias = {p.categoria for p in self.produtos if p.categoria}
        return Estatisticas(
            total_produtos=len(self.produtos),
            total_valor=sum_precos(self.produtos),
            total_categorias=len(categorias),
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _index_of(self, produto_id: str) -> int | None:
        for i, p in enumerate(self.produtos):
            if p.id == produto_id:
                return i
        return None

    async def _remote(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise RemoteTimeoutException(operation, self.timeout_seconds) from exc

    def _failure(self, operation: str, exc: Exception) -> Failure:
        if isinstance(exc, CestasException):
            logger.warning(f"Card {self.card_id}: {operation} failed [{exc.code}] {exc.message}")
            return Failure(exc.message, details=exc.details, code=exc.code)
        logger.exception(f"Card {self.card_id}: unexpected error in {operation}")
        return Failure(_message(exc), code="INTERNAL_ERROR")


def _message(exc: BaseException) -> str:
    if isinstance(exc, CestasException):
        return exc.message
    return str(exc) or type(exc).__name__
