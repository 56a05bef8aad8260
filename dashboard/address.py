"""Wallet address input and URL-fragment routing."""

import re
from typing import Optional

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
INVALID_ADDRESS_MESSAGE = "Invalid Ethereum address format."


class InvalidAddressError(ValueError):
    """Address input rejected before any request is made."""

    field = "address"

    def __init__(self, value: str, message: str = INVALID_ADDRESS_MESSAGE):
        self.value = value
        self.message = message
        super().__init__(message)


def normalize_address(raw: str) -> str:
    """Trim and add the ``0x`` prefix when it was left off (``0X`` is accepted)."""
    value = (raw or "").strip()
    if value[:2].lower() == "0x":
        return "0x" + value[2:]
    return "0x" + value


def is_valid_address(address: str) -> bool:
    return bool(ADDRESS_RE.match(address or ""))


def parse_address(raw: str) -> str:
    """Normalized address, or InvalidAddressError with a field-level message."""
    address = normalize_address(raw)
    if not is_valid_address(address):
        raise InvalidAddressError(raw)
    return address


def address_from_fragment(fragment: str) -> Optional[str]:
    """Address carried by a ``#0x...`` fragment; the prefix is required here."""
    value = (fragment or "").lstrip("#")
    return value if is_valid_address(value) else None


def fragment_for(address: Optional[str]) -> str:
    return f"#{address}" if address else ""


def trunc_addr(address: str) -> str:
    return f"{address[:8]}...{address[-6:]}"
