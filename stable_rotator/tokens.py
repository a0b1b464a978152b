"""Static token address tables for Base mainnet."""
from __future__ import annotations

# Plain stablecoins (not deposited anywhere, earn nothing).
UNDERLYING_TOKENS: dict[str, str] = {
    "USDC": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    "USDbC": "0xd9aAEc86B65D86f6A7B5B1b0c42FFA531710b6CA",
    "DAI": "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb",
}

_MOONWELL = {
    "USDC": "0xEdc817A28E8B93B03976FBd4a3dDBc9f7D176c22",  # mUSDC
    "USDbC": "0x703843C3379b52F9FF486c9f5892218d2a065cC8",  # mUSDbC
    "DAI": "0x73b06D8d18De422E269645eaCe15400DE7462417",  # mDAI
}

# DeFiLlama project slug -> symbol fragment -> swappable token address.
# Fragments are tried in insertion order.
TOKEN_ADDRESS_MAP: dict[str, dict[str, str]] = {
    "aave-v3": {
        "USDC": "0x4e65fE4DbA92790696d040ac24Aa414708F5c0AB",  # aBasUSDC
        "USDbC": "0x0a1d576f3eFeB55CCf1A5452F3cDE8a5B161BCaD",  # aBasUSDbC
    },
    "compound-v3": {
        "USDC": "0xb125E6687d4313864e53df431d5425969c15Eb2F",  # cUSDCv3
    },
    "moonwell": _MOONWELL,
    "moonwell-lending": _MOONWELL,
    "seamless-protocol": {
        "USDC": "0x53E240C0F985175dA046A62F26D490d1E259036e",  # sUSDC
    },
    # Vault deposits are entered with the underlying token.
    "morpho-blue": {
        "USDC": UNDERLYING_TOKENS["USDC"],
    },
    "extra-finance": {
        "USDC": UNDERLYING_TOKENS["USDC"],
    },
}


def resolve_token_address(protocol: str, symbol: str) -> str | None:
    """Return the swappable token address for a pool, or None if unmapped.

    The first fragment of the protocol's table contained in ``symbol``
    (case-insensitive) wins, so ``"USDC-ETH"`` under aave-v3 resolves to
    the aBasUSDC address.
    """
    project_map = TOKEN_ADDRESS_MAP.get(protocol or "")
    if not project_map or not symbol:
        return None

    upper = symbol.upper()
    for fragment, address in project_map.items():
        if fragment.upper() in upper:
            return address
    return None


def underlying_addresses() -> frozenset[str]:
    return frozenset(a.lower() for a in UNDERLYING_TOKENS.values())


def yield_bearing_addresses() -> frozenset[str]:
    """Every mapped address that is not a plain underlying token."""
    plain = underlying_addresses()
    return frozenset(
        address.lower()
        for project_map in TOKEN_ADDRESS_MAP.values()
        for address in project_map.values()
        if address.lower() not in plain
    )
