"""
Small helpers shared by the service actions.

encrypt_id / decrypt_id are an *encoding*, not encryption: the sharable ID
is handed to other users so they can send money to an account, and the
server must be able to turn it back into the Plaid account ID. Anything
actually secret goes through bankdash.security instead.
"""

import base64
import json
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel


def encrypt_id(value: str) -> str:
    """Encode an ID into its sharable form (base64)."""
    return base64.b64encode(value.encode()).decode()


def decrypt_id(sharable_id: str) -> str:
    """Decode a sharable ID produced by encrypt_id()."""
    return base64.b64decode(sharable_id.encode(), validate=True).decode()


def extract_customer_id_from_url(url: str) -> str:
    """
    Return the customer ID at the end of a Dwolla customer URL.

    >>> extract_customer_id_from_url("https://api-sandbox.dwolla.com/customers/abc-123")
    'abc-123'
    """
    path = urlparse(url).path.rstrip("/")
    return path.rsplit("/", 1)[-1]


def parse_stringify(value: Any) -> Any:
    """
    Convert a value into plain JSON-compatible data.

    Pydantic models are dumped in JSON mode (UUIDs and datetimes become
    strings); anything else is round-tripped through json with str() as
    the fallback encoder.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return json.loads(json.dumps(value, default=str))


def format_amount(amount_cents: int) -> str:
    """Format integer cents as a decimal string, e.g. 1050 -> "10.50"."""
    sign = "-" if amount_cents < 0 else ""
    dollars, cents = divmod(abs(amount_cents), 100)
    return f"{sign}{dollars}.{cents:02d}"


def full_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}"
