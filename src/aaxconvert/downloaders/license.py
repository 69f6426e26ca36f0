"""License (``.adh``) file parsing."""

import re
from urllib.parse import unquote, unquote_plus

from aaxconvert.errors import ValidationError
from aaxconvert.models import LicenseDescriptor

# Model field -> key in the license file
LICENSE_FIELDS = {
    "customer_id": "cust_id",
    "product_id": "product_id",
    "codec": "codec",
    "title": "title",
}


def _find_value(content: str, key: str) -> str | None:
    """Return the value of ``key=value``, ended by ``&`` or end of content."""
    match = re.search(rf"(?<![\w]){re.escape(key)}=([^&\r\n]*)", content)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def parse_license(content: str) -> LicenseDescriptor:
    """Parse the query-string-like content of a license file.

    Raises:
        ValidationError: If any of cust_id, product_id, codec, title is missing
    """
    values: dict[str, str] = {}
    missing: list[str] = []
    for field_name, key in LICENSE_FIELDS.items():
        value = _find_value(content, key)
        if value is None:
            missing.append(key)
            continue
        values[field_name] = unquote_plus(value) if field_name == "title" else unquote(value)

    if missing:
        raise ValidationError(f"Invalid license file, missing: {', '.join(missing)}")
    return LicenseDescriptor(**values)


def read_license(path: str) -> LicenseDescriptor:
    """Read and parse a license file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If a required field is missing
    """
    with open(path, encoding="utf-8", errors="replace") as f:
        return parse_license(f.read())
