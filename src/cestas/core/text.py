"""
Cestas Core - Text helpers.

Accent-insensitive normalization shared by duplicate detection and by the
per-card table name stored with every product.
"""

import re
import unicodedata

TABLE_NAME_PREFIX = "tabela_"
TABLE_NAME_MAX_LENGTH = 55


def strip_accents(text: str) -> str:
    """Drop combining marks after canonical decomposition (NFD)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(name: str | None) -> str:
    """Lower-case, trim and strip accents so "Café " and "cafe" compare equal."""
    if not name:
        return ""
    return strip_accents(name.lower().strip())


def sanitize_table_name(card_name: str) -> str:
    """
    Derive the per-card table name.

    >>> sanitize_table_name("Minha Lista de Café!")
    'tabela_minha_lista_de_cafe'
    """
    slug = strip_accents(card_name.lower())
    slug = re.sub(r"[^a-z0-9]", "_", slug)
    slug = re.sub(r"_+", "_", slug)
    slug = slug.strip("_")
    return TABLE_NAME_PREFIX + slug[:TABLE_NAME_MAX_LENGTH]
