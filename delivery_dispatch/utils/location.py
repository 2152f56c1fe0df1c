"""Address display helpers."""

from delivery_dispatch.models.vendor import Address


def format_address(address: Address | None) -> str:
    """Render an address on one line, e.g. ``12 Main St Apt 4, Springfield, IL 62701``."""
    if address is None:
        return ""

    street = " ".join(part for part in (address.street, address.unit) if part)
    region = " ".join(part for part in (address.state, address.zip_code) if part)

    return ", ".join(
        part for part in (street, address.city, region, address.country) if part
    )


def format_addresses(addresses: list[Address | None]) -> str:
    """Render several delivery addresses, separated by semicolons."""
    return "; ".join(
        formatted for formatted in (format_address(address) for address in addresses) if formatted
    )
