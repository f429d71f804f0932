"""Cestas - card and product tables over Supabase."""

__version__ = "0.1.0"
