"""Lectura del estado de nftables."""

from .ruleset import read_nftables_ruleset

__all__ = ["read_nftables_ruleset"]
