"""
Cestas Tables - View helpers.

Pure functions over a product list: filtering, totals, category listing and
drag reordering. None of them mutate their input.
"""

from decimal import Decimal

from cestas.modules.tables.schemas import Produto, TableFilters, Totais

SEARCH_FIELDS = ("nome", "categoria", "descricao")


def filter_produtos(produtos: list[Produto], filters: TableFilters) -> list[Produto]:
    """Apply search (substring over name/category/description), category and importance filters."""
    filtered = list(produtos)

    term = filters.search.lower()
    if term:
        filtered = [
            p for p in filtered
            if any(term in (getattr(p, f) or "").lower() for f in SEARCH_FIELDS)
        ]

    if filters.categoria:
        filtered = [p for p in filtered if p.categoria == filters.categoria]

    if filters.importancia:
        filtered = [p for p in filtered if p.importancia == filters.importancia]

    return filtered


def sum_precos(produtos: list[Produto]) -> Decimal:
    return sum((p.preco for p in produtos), Decimal("0"))


def compute_totals(produtos: list[Produto], frete: Decimal | int | float = 0) -> Totais:
    """Subtotal of ``produtos`` (already filtered) plus the card's single shipping value."""
    frete = Decimal(str(frete)) if not isinstance(frete, Decimal) else frete
    subtotal = sum_precos(produtos)
    return Totais(
        quantidade=len(produtos),
        subtotal=subtotal,
        frete=frete,
        total=subtotal + frete,
    )


def list_categorias(produtos: list[Produto]) -> list[str]:
    """Distinct non-empty categories, in first-seen order."""
    seen: dict[str, None] = {}
    for p in produtos:
        if p.categoria:
            seen.setdefault(p.categoria, None)
    return list(seen)


def renumber(produtos: list[Produto]) -> list[Produto]:
    """Copies of ``produtos`` with ``ordem`` matching list position."""
    return [p.model_copy(update={"ordem": i}) for i, p in enumerate(produtos)]


def move_produto(produtos: list[Produto], dragged_id: str, target_id: str) -> list[Produto]:
    """
    Drop ``dragged_id`` at the position currently held by ``target_id``.

    Unknown ids or a drop onto itself return the list unchanged (renumbered).
    """
    ids = [p.id for p in produtos]
    if dragged_id not in ids or target_id not in ids or dragged_id == target_id:
        return renumber(produtos)

    reordered = list(produtos)
    dragged_index = ids.index(dragged_id)
    target_index = ids.index(target_id)
    dragged = reordered.pop(dragged_index)
    reordered.insert(target_index, dragged)
    return renumber(reordered)


def apply_order(produtos: list[Produto], ordered_ids: list[str]) -> list[Produto]:
    """
    Arrange ``produtos`` following ``ordered_ids`` and renumber.

    Products missing from ``ordered_ids`` keep their relative order after the
    listed ones; ids with no matching product are ignored, and a repeated id
    counts at its first occurrence only.
    """
    by_id = {p.id: p for p in produtos}
    listed = [by_id[i] for i in dict.fromkeys(ordered_ids) if i in by_id]
    listed_ids = {p.id for p in listed}
    rest = [p for p in produtos if p.id not in listed_ids]
    return renumber(listed + rest)
