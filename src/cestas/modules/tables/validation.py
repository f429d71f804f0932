"""
Cestas Tables - Validation.

Checks applied before a mutation reaches the remote store. Nothing here
performs I/O; failures raise ``ValidationException`` or ``ConflictException``.
"""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

from cestas.config import get_settings
from cestas.core.images import validate_image_url
from cestas.core.text import normalize_name
from cestas.exceptions import ConflictException, ValidationException
from cestas.modules.tables.schemas import Importancia, ProdutoInput


def parse_money(value: Any, field: str = "valor", *, allow_zero: bool = True) -> Decimal:
    """
    Parse a price or shipping value into a Decimal.

    Accepts numbers and numeric strings (a decimal comma is accepted, as typed
    in pt-BR). Rejects anything non-numeric, non-finite or negative; with
    ``allow_zero=False`` zero is rejected too.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationException(f"{field} é obrigatório", errors=[{"field": field, "value": value}])

    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            raise ValidationException(f"{field} é obrigatório", errors=[{"field": field, "value": ""}])

    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationException(f"{field} deve ser numérico", errors=[{"field": field, "value": str(value)}])

    if not amount.is_finite():
        raise ValidationException(f"{field} deve ser numérico", errors=[{"field": field, "value": str(value)}])
    if amount < 0:
        raise ValidationException(f"{field} não pode ser negativo", errors=[{"field": field, "value": str(value)}])
    if not allow_zero and amount == 0:
        raise ValidationException(f"{field} deve ser maior que zero", errors=[{"field": field, "value": str(value)}])
    return amount


def validate_produto(data: ProdutoInput, max_image_bytes: int | None = None) -> ProdutoInput:
    """
    Validate a product about to be created or saved.

    Returns a copy with the name trimmed and the price parsed to Decimal. An
    image, when sent, must be an image data URL within ``max_image_bytes``
    (``AVATAR_MAX_BYTES`` by default) or an http(s) URL.
    """
    nome = (data.nome or "").strip()
    if not nome:
        raise ValidationException("Nome do produto é obrigatório", errors=[{"field": "nome"}])

    try:
        preco = parse_money(data.preco, "Preço", allow_zero=False)
    except ValidationException as exc:
        raise ValidationException("Preço deve ser maior que zero", errors=(exc.details or {}).get("errors"))

    importancia = data.importancia or None
    if importancia is not None and importancia not in {imp.value for imp in Importancia}:
        raise ValidationException(
            "Importância inválida",
            errors=[{"field": "importancia", "value": importancia}],
        )

    update: dict[str, Any] = {"nome": nome, "preco": preco, "importancia": importancia}
    if "imagem" in data.model_fields_set:
        if max_image_bytes is None:
            max_image_bytes = get_settings().avatar_max_bytes
        update["imagem"] = validate_image_url(data.imagem, max_image_bytes)
    return data.model_copy(update=update)


def is_duplicate_name(name: str, existing: Iterable[dict[str, Any]], exclude_id: Any = None) -> bool:
    """True if ``name`` matches an existing card name, ignoring case, accents and outer spaces."""
    candidate = normalize_name(name)
    for card in existing:
        if exclude_id is not None and str(card.get("id")) == str(exclude_id):
            continue
        if normalize_name(card.get("name")) == candidate:
            return True
    return False


def validate_card_name(name: str | None, existing: Iterable[dict[str, Any]], exclude_id: Any = None) -> str:
    """Return the trimmed card name, or raise if empty or already taken."""
    if not name or not name.strip():
        raise ValidationException("Nome do card é obrigatório", errors=[{"field": "name"}])
    if is_duplicate_name(name, existing, exclude_id=exclude_id):
        raise ConflictException("Já existe um card com esse nome", field="name")
    return name.strip()
