"""Vault Allocator: risk-gated market scoring and target allocation weights."""

__version__ = "0.1.0"
