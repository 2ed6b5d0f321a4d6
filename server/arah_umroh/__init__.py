"""Arah Umroh marketplace API."""
