"""Persistence backends for the opaque key-value store port."""
