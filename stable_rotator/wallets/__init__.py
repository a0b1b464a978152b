"""Wallet-management API integrations."""
