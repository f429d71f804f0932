"""Cestas Modules - cards, product tables and users."""
