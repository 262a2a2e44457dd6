"""Display helpers."""


def shorten_address(address: str | None) -> str | None:
    """Abbreviate long addresses as ``first4...mid3...last4``.

    Addresses shorter than 15 characters are returned unchanged.
    """
    if not address or len(address) < 15:
        return address
    mid_start = len(address) // 2 - 1
    return f"{address[:4]}...{address[mid_start:mid_start + 3]}...{address[-4:]}"
