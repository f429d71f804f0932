"""
Cestas Core - Images.

Avatars, product photos and card covers are stored inline as base64 data
URLs; there is no object storage. Everything a client sends as an image goes
through here: image types only, at most ``max_bytes`` once decoded.
"""

import base64
import binascii

from cestas.exceptions import ValidationException


def to_data_url(content: bytes, content_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def validate_image(content: bytes | None, content_type: str | None, max_bytes: int) -> None:
    """Reject missing files, non-images and files above ``max_bytes``."""
    if not content:
        raise ValidationException("Nenhum arquivo selecionado")
    if not (content_type or "").startswith("image/"):
        raise ValidationException("Apenas imagens são permitidas")
    if len(content) > max_bytes:
        raise ValidationException(f"Imagem deve ter no máximo {max_bytes // (1024 * 1024)}MB")


def validate_image_url(value: str | None, max_bytes: int, field: str = "imagem") -> str | None:
    """
    Check an image reference sent in a JSON body.

    Blank values give None. ``http(s)`` URLs are kept as they are. A
    ``data:`` URL must be base64 of an ``image/*`` type within ``max_bytes``.
    Anything else is rejected.
    """
    value = (value or "").strip()
    if not value:
        return None
    if value.startswith(("http://", "https://")):
        return value
    if not value.startswith("data:"):
        raise ValidationException("Imagem inválida", errors=[{"field": field}])

    header, sep, payload = value[len("data:"):].partition(",")
    params = header.split(";")
    if not sep or "base64" not in params[1:]:
        raise ValidationException("Imagem deve estar em base64", errors=[{"field": field}])
    try:
        content = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationException("Imagem inválida", errors=[{"field": field}])

    validate_image(content, params[0], max_bytes)
    return value
