# utils/ip_utils.py
"""
IP address validation helpers.

The address string itself is used as the cache key, so nothing here rewrites
the caller's input (no leading-zero stripping or IPv6 compression).
"""
import ipaddress


class InvalidIPError(ValueError):
    """Raised when a string is not a syntactically valid IPv4/IPv6 address."""


def parse_ip(value):
    if not isinstance(value, str) or not value:
        raise InvalidIPError("IP address is required")
    if value != value.strip() or "%" in value:
        # no surrounding whitespace, no IPv6 zone ids
        raise InvalidIPError(f"Invalid IP address: {value!r}")
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        raise InvalidIPError(f"Invalid IP address: {value!r}") from None


def is_valid_ip(value):
    try:
        parse_ip(value)
        return True
    except InvalidIPError:
        return False


def ip_version(value):
    """Return "IPv4" / "IPv6" for a valid address, raise InvalidIPError otherwise."""
    return "IPv4" if parse_ip(value).version == 4 else "IPv6"
