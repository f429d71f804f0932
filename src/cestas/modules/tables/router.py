"""Cestas Tables - Router.

REST API endpoints for a card's product table. Each request builds a
``TableApp`` over the card's shared StorageManager.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from cestas.auth import get_current_user
from cestas.auth.schemas import User
from cestas.core.result import Failure, Result
from cestas.deps import get_tables_manager, require_tables
from cestas.exceptions import (
    NotFoundException,
    OperationFailedException,
    RemoteTimeoutException,
    ValidationException,
)
from cestas.modules.tables.registry import TablesManager
from cestas.modules.tables.schemas import (
    Estatisticas,
    FreteRequest,
    FreteResponse,
    Produto,
    ProdutoInput,
    ReorderRequest,
    ReorderResponse,
    ReorderRetryRequest,
    TableView,
)
from cestas.modules.tables.service import TableApp

router = APIRouter(prefix="/cards/{card_id}", tags=["Tables"], dependencies=[require_tables])

Tables = Annotated[TablesManager, Depends(get_tables_manager)]


async def _open(card_id: str, tables: TablesManager, reload: bool = False) -> TableApp:
    """Controller over the card's table; unknown cards are released and answered with 404."""
    app = TableApp(card_id, tables)
    if reload:
        await app.reload()
    else:
        await app.init()
    if app.storage.card_missing:
        tables.delete_table(card_id)
        raise NotFoundException("Card", card_id, message="Card não encontrado")
    return app


def _unwrap(result: Result):
    """Return the success payload or raise the failure as an API error."""
    if isinstance(result, Failure):
        details = result.details if isinstance(result.details, dict) else {}
        if result.code == "NOT_FOUND":
            raise NotFoundException("Produto", details.get("resource_id", ""), message=result.error)
        if result.code == "VALIDATION_ERROR":
            raise ValidationException(result.error)
        if result.code == "REMOTE_TIMEOUT":
            raise RemoteTimeoutException(
                details.get("operation", "remote call"), details.get("timeout_seconds", 0)
            )
        details = result.to_dict().get("details")
        raise OperationFailedException(result.error, details=details if isinstance(details, dict) else None)
    return result.data

@router.get("/produtos", response_model=TableView)
async def get_table(
    card_id: str,
    tables: Tables,
    search: str = Query(default=""),
    categoria: str = Query(default=""),
    importancia: str = Query(default=""),
    user: User = Depends(get_current_user),
) -> TableView:
    """Filtered products of the card, with categories and totals."""
    app = await _open(card_id, tables)
    app.set_filters(search=search, categoria=categoria, importancia=importancia)
    return app.view()


@router.post("/produtos", response_model=Produto, status_code=status.HTTP_201_CREATED)
async def create_produto(
    card_id: str,
    data: ProdutoInput,
    tables: Tables,
    user: User = Depends(get_current_user),
) -> Produto:
    """Add a product to the card."""
    app = await _open(card_id, tables)
    return _unwrap(await app.save_produto(data))


@router.put("/produtos/{produto_id}", response_model=Produto)
async def save_produto(
    card_id: str,
    produto_id: str,
    data: ProdutoInput,
    tables: Tables,
    user: User = Depends(get_current_user),
) -> Produto:
    """Save every field of an existing product."""
    app = await _open(card_id, tables)
    return _unwrap(await app.save_produto(data, editing_id=produto_id))


@router.delete("/produtos/{produto_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_produto(
    card_id: str,
    produto_id: str,
    tables: Tables,
    user: User = Depends(get_current_user),
):
    """Remove a product from the card."""
    app = await _open(card_id, tables)
    _unwrap(await app.delete_produto(produto_id))
    return None


@router.post("/produtos/reorder", response_model=ReorderResponse)
async def reorder_produtos(
    card_id: str,
    data: ReorderRequest,
    tables: Tables,
    user: User = Depends(get_current_user),
) -> ReorderResponse:
    """Drag one product onto another, or send the complete order."""
    app = await _open(card_id, tables)
    if data.ordered_ids is not None:
        result = await app.reorder_to(data.ordered_ids)
    elif data.dragged_id and data.target_id:
        result = await app.reorder(data.dragged_id, data.target_id)
    else:
        raise ValidationException("Informe dragged_id e target_id, ou ordered_ids")
    report = _unwrap(result)
    return ReorderResponse(produtos=app.produtos, report=report.to_dict())


@router.post("/produtos/reorder/retry", response_model=ReorderResponse)
async def retry_reorder(
    card_id: str,
    data: ReorderRetryRequest,
    tables: Tables,
    user: User = Depends(get_current_user),
) -> ReorderResponse:
    """Save again the positions listed as failed in a previous reorder report."""
    app = await _open(card_id, tables)
    report = _unwrap(await app.retry_reorder(data.to_report()))
    return ReorderResponse(produtos=app.produtos, report=report.to_dict())


@router.post("/produtos/reload", response_model=TableView)
async def reload_table(card_id: str, tables: Tables, user: User = Depends(get_current_user)) -> TableView:
    """Drop the card's cache and reload name, products and shipping from the store."""
    app = await _open(card_id, tables, reload=True)
    return app.view()


@router.get("/frete", response_model=FreteResponse)
async def get_frete(card_id: str, tables: Tables, user: User = Depends(get_current_user)) -> FreteResponse:
    app = await _open(card_id, tables)
    return FreteResponse(card_id=app.card_id, frete=app.storage.get_frete())


@router.put("/frete", response_model=FreteResponse)
async def save_frete(
    card_id: str,
    data: FreteRequest,
    tables: Tables,
    user: User = Depends(get_current_user),
) -> FreteResponse:
    """Persist the card's shipping value."""
    app = await _open(card_id, tables)
    frete = _unwrap(await app.save_frete(data.frete))
    return FreteResponse(card_id=app.card_id, frete=frete)


@router.delete("/frete", response_model=FreteResponse)
async def clear_frete(card_id: str, tables: Tables, user: User = Depends(get_current_user)) -> FreteResponse:
    """Reset the card's shipping value to zero."""
    app = await _open(card_id, tables)
    frete = _unwrap(await app.save_frete(0))
    return FreteResponse(card_id=app.card_id, frete=frete)


@router.get("/estatisticas", response_model=Estatisticas)
async def get_estatisticas(card_id: str, tables: Tables, user: User = Depends(get_current_user)) -> Estatisticas:
    app = await _open(card_id, tables)
    return app.storage.get_estatisticas()
