"""
Cestas Core - shared building blocks.

- supabase_client: configured Supabase client
- repository: base repository with timeouts and call metrics
- result: Success / Failure returned by table operations
- text: accent-insensitive normalization helpers
"""

from cestas.core.result import Failure, Result, Success
from cestas.core.text import normalize_name, sanitize_table_name

__all__ = ["Failure", "Result", "Success", "normalize_name", "sanitize_table_name"]
