"""Stablecoin yield rotator for Swarm Vault managed wallets."""

__version__ = "0.1.0"
