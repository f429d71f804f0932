"""
Cestas Tables - Schemas.

Pydantic models for the per-card product table.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Importance
# =============================================================================


class Importancia(str, Enum):
    """Product priority. Stored as 1..4, displayed as text."""

    LUXO = "Luxo"
    IMPORTANTE = "Importante"
    ESSENCIAL = "Essencial"
    FUTURO = "Futuro"


IMPORTANCIA_POR_NUMERO: dict[int, Importancia] = {
    1: Importancia.LUXO,
    2: Importancia.IMPORTANTE,
    3: Importancia.ESSENCIAL,
    4: Importancia.FUTURO,
}
NUMERO_POR_IMPORTANCIA: dict[str, int] = {imp.value: num for num, imp in IMPORTANCIA_POR_NUMERO.items()}


def importancia_to_text(numero: Any) -> str | None:
    """Map a stored importance number to its label; unknown values give None."""
    try:
        imp = IMPORTANCIA_POR_NUMERO.get(int(numero))
    except (TypeError, ValueError):
        return None
    return imp.value if imp else None


def importancia_to_number(texto: Any) -> int | None:
    """Map an importance label to its stored number; unknown labels give None."""
    if isinstance(texto, Importancia):
        texto = texto.value
    return NUMERO_POR_IMPORTANCIA.get(texto) if isinstance(texto, str) else None


def _to_decimal(value: Any) -> Any:
    # floats go through str() so 25.5 becomes Decimal("25.5"), not its binary expansion
    if isinstance(value, float):
        return Decimal(str(value))
    return value


# =============================================================================
# Product Schemas
# =============================================================================


class Produto(BaseModel):
    """A product as held in the per-card replica."""

    id: str
    nome: str = ""
    preco: Decimal = Decimal("0")
    imagem: str | None = None
    link: str | None = None
    categoria: str | None = None
    descricao: str | None = None
    importancia: str | None = None
    ordem: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> str:
        return str(v)

    @field_validator("preco", mode="before")
    @classmethod
    def _preco_decimal(cls, v: Any) -> Any:
        if v is None or v == "":
            return Decimal("0")
        return _to_decimal(v)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Produto":
        """Build a replica entry from a ``tabelas_card`` row."""
        return cls(
            id=row["id"],
            nome=row.get("nome_produto") or "",
            preco=row.get("preco"),
            imagem=row.get("imagem"),
            link=row.get("link"),
            categoria=row.get("categoria"),
            descricao=row.get("descricao"),
            importancia=importancia_to_text(row.get("importancia")),
            ordem=row.get("ordem") or 0,
        )


class ProdutoInput(BaseModel):
    """
    Product fields as typed by the user.

    ``preco`` is kept raw until validation so a malformed value can be
    rejected with a clear message instead of being coerced.
    """

    nome: str | None = None
    preco: Decimal | float | int | str | None = None
    imagem: str | None = None
    link: str | None = None
    categoria: str | None = None
    descricao: str | None = None
    importancia: str | None = None
    ordem: int | None = None

    def to_row(self, partial: bool = False) -> dict[str, Any]:
        """
        Map user fields to ``tabelas_card`` columns.

        With ``partial`` only explicitly set fields are emitted.
        """
        data = self.model_dump(exclude_unset=partial)
        row: dict[str, Any] = {}
        column_map = {
            "nome": "nome_produto",
            "imagem": "imagem",
            "link": "link",
            "categoria": "categoria",
            "descricao": "descricao",
        }
        for key, column in column_map.items():
            if key in data:
                value = data[key]
                if key == "nome":
                    row[column] = value or ""
                else:
                    row[column] = value or None
        if "preco" in data:
            row["preco"] = float(data["preco"]) if data["preco"] not in (None, "") else 0
        if "importancia" in data:
            row["importancia"] = importancia_to_number(data["importancia"])
        if "ordem" in data:
            row["ordem"] = data["ordem"] or 0
        return row


class Estatisticas(BaseModel):
    """Aggregates computed directly from the replica."""

    total_produtos: int
    total_valor: Decimal
    total_categorias: int


class Totais(BaseModel):
    """Totals of the currently filtered view."""

    quantidade: int
    subtotal: Decimal
    frete: Decimal
    total: Decimal


# =============================================================================
# Filters / Reorder
# =============================================================================


class TableFilters(BaseModel):
    """Current filter state of a table view."""

    search: str = ""
    categoria: str = ""
    importancia: str = ""


@dataclass
class ReorderReport:
    """Outcome of persisting a new display order, one write per product."""

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, int] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": list(self.succeeded),
            "failed": dict(self.failed),
            "errors": dict(self.errors),
        }


# =============================================================================
# Request / Response bodies
# =============================================================================


class ReorderRequest(BaseModel):
    """Either a drag (dragged onto target) or a full explicit order."""

    dragged_id: str | None = None
    target_id: str | None = None
    ordered_ids: list[str] | None = None


class ReorderRetryRequest(BaseModel):
    """The report of a reorder that did not save every position."""

    succeeded: list[str] = Field(default_factory=list)
    failed: dict[str, int] = Field(default_factory=dict)

    def to_report(self) -> ReorderReport:
        return ReorderReport(succeeded=list(self.succeeded), failed=dict(self.failed))


class FreteRequest(BaseModel):
    frete: Decimal | float | int | str


class FreteResponse(BaseModel):
    card_id: str
    frete: Decimal


class TableView(BaseModel):
    """What a client needs to render one card's table."""

    card_id: str
    card_name: str
    produtos: list[Produto]
    categorias: list[str]
    filters: TableFilters
    totais: Totais


class ReorderResponse(BaseModel):
    produtos: list[Produto]
    report: dict[str, Any] = Field(default_factory=dict)
