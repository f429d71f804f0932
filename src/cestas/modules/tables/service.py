"""
Cestas Tables - Table controller.

``TableApp`` is the view/controller over one card's StorageManager: it keeps
the list being displayed and the filter state, turns user actions into
storage calls and patches its own list from the returned records.

Controllers are cheap and built per request; several may share one
StorageManager, whose mutation lock is what serializes writes to a card.
"""

import logging
from decimal import Decimal
from typing import Any

from cestas.core.result import Failure, Result, Success
from cestas.modules.tables.filters import compute_totals, filter_produtos, list_categorias, move_produto
from cestas.modules.tables.registry import TablesManager
from cestas.modules.tables.schemas import (
    Produto,
    ProdutoInput,
    ReorderReport,
    TableFilters,
    TableView,
    Totais,
)
from cestas.modules.tables.validation import parse_money, validate_produto

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Gerenciador de Produtos"


class TableApp:
    """Controller for one card's product table."""

    def __init__(self, card_id: str, tables: TablesManager):
        self.card_id = str(card_id)
        self.storage = tables.get_table(self.card_id)
        self.produtos: list[Produto] = []
        self.filters = TableFilters()

    async def init(self) -> None:
        await self.storage.init()
        await self.load_data()

    async def load_data(self) -> None:
        result = await self.storage.load_produtos()
        self.produtos = result.data if isinstance(result, Success) else []

    async def reload(self) -> None:
        """Drop the card's cache and load everything again from the store."""
        await self.storage.recarregar()
        await self.load_data()

    # -------------------------------------------------------------------------
    # View state
    # -------------------------------------------------------------------------

    def card_title(self) -> str:
        return self.storage.card_name or DEFAULT_TITLE

    def set_filters(self, search: str = "", categoria: str = "", importancia: str = "") -> None:
        self.filters = TableFilters(
            search=(search or "").strip(),
            categoria=categoria or "",
            importancia=importancia or "",
        )

    def filtered_produtos(self) -> list[Produto]:
        return filter_produtos(self.produtos, self.filters)

    def categorias(self) -> list[str]:
        return list_categorias(self.produtos)

    def totais(self) -> Totais:
        return compute_totals(self.filtered_produtos(), self.storage.get_frete())

    def view(self) -> TableView:
        return TableView(
            card_id=self.card_id,
            card_name=self.card_title(),
            produtos=self.filtered_produtos(),
            categorias=self.categorias(),
            filters=self.filters,
            totais=self.totais(),
        )

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def save_produto(self, data: ProdutoInput, editing_id: str | None = None) -> Result[Produto]:
        """
        Create a product, or save ``editing_id`` with the given fields.

        Raises:
            ValidationException: Before any remote call, on empty name, bad price or bad image
        """
        data = validate_produto(data)
        if editing_id is None and data.ordem is None:
            data = data.model_copy(update={"ordem": len(self.produtos)})

        if editing_id is not None:
            result = await self.storage.atualizar_produto(editing_id, data)
            if isinstance(result, Success):
                self._replace(result.data)
        else:
            result = await self.storage.adicionar_produto(data)
            if isinstance(result, Success):
                self.produtos.append(result.data)

        if isinstance(result, Failure):
            logger.warning(f"Card {self.card_id}: saving produto failed: {result.error}")
        return result

    async def delete_produto(self, produto_id: str) -> Result[None]:
        produto_id = str(produto_id)
        result = await self.storage.remover_produto(produto_id)
        if isinstance(result, Success):
            self.produtos = [p for p in self.produtos if p.id != produto_id]
        return result

    async def reorder(self, dragged_id: str, target_id: str) -> Result[ReorderReport]:
        """Move ``dragged_id`` onto ``target_id``'s position and persist the whole order."""
        self.produtos = move_produto(self.produtos, str(dragged_id), str(target_id))
        return await self.storage.reordenar_produtos([p.id for p in self.produtos])

    async def reorder_to(self, ordered_ids: list[str]) -> Result[ReorderReport]:
        result = await self.storage.reordenar_produtos(ordered_ids)
        await self.load_data()
        return result

    async def retry_reorder(self, report: ReorderReport) -> Result[ReorderReport]:
        """
        Send again the positions a previous reorder could not save.

        Positions are taken from the replica, which already holds the new
        order; ids no longer in the table are dropped.
        """
        failed = {}
        for produto_id in report.failed:
            produto = self.storage.get_produto_by_id(produto_id)
            if produto is not None:
                failed[produto_id] = produto.ordem
        pending = ReorderReport(succeeded=list(report.succeeded), failed=failed)
        if pending.complete:
            return Success(pending)
        return await self.storage.retry_reordenacao(pending)

    async def save_frete(self, valor: Any) -> Result[Decimal]:
        """
        Persist the shipping value.

        Raises:
            ValidationException: For non-numeric or negative values
        """
        frete = parse_money(valor, "Frete")
        return await self.storage.salvar_frete(frete)

    def _replace(self, produto: Produto) -> None:
        for i, p in enumerate(self.produtos):
            if p.id == produto.id:
                self.produtos[i] = produto
                return
