"""Swarm Vault wallet-management API."""
from .client import SwarmVaultClient, SwarmVaultError
from .parser import parse_accounts, parse_holding

__all__ = ["SwarmVaultClient", "SwarmVaultError", "parse_accounts", "parse_holding"]
