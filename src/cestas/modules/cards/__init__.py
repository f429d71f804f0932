"""Cestas Cards Module - card collections, unique names, shipping and summary."""
