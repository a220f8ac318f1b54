"""
Dwolla service — payments network actions.

Each function here performs one exchange with Dwolla and returns the
resource it produced (normally a URL from the Location header). Following
the application-wide action contract, failures are logged and the
function returns None; callers check for None and decide what that means
for their own flow.

Funding sources:
  A linked bank becomes a Dwolla funding source via a Plaid processor
  token. Dwolla requires an on-demand authorization for the customer to
  debit that source later, so add_funding_source() creates the
  authorization first and attaches its link to the new funding source.
"""

import logging
from typing import Any

from bankdash.clients import dwolla_client
from bankdash.exceptions import VendorError
from bankdash.utils import format_amount

logger = logging.getLogger(__name__)


def _location(response) -> str:
    location = response.headers.get("location")
    if not location:
        raise VendorError("Dwolla response did not include a Location header")
    return location


async def create_dwolla_customer(new_customer: dict[str, Any]) -> str | None:
    """
    Create a Dwolla customer.

    Args:
        new_customer: Dwolla customer body (firstName, lastName, email,
            type, address1, city, state, postalCode, dateOfBirth, ssn).

    Returns:
        The new customer's URL, or None on failure.
    """
    try:
        client = dwolla_client.get_dwolla_client()
        response = await client.post("customers", new_customer)
        return _location(response)
    except Exception:
        logger.exception("Creating a Dwolla customer failed")
        return None


async def create_on_demand_authorization() -> dict[str, Any] | None:
    """Create an on-demand authorization; returns its `_links` object."""
    try:
        client = dwolla_client.get_dwolla_client()
        response = await client.post("on-demand-authorizations")
        return response.json()["_links"]
    except Exception:
        logger.exception("Creating a Dwolla on-demand authorization failed")
        return None


async def create_funding_source(
    customer_id: str,
    funding_source_name: str,
    plaid_token: str,
    on_demand_authorization_links: dict[str, Any] | None = None,
) -> str | None:
    """
    Create a bank funding source for a customer from a Plaid processor token.

    Returns:
        The funding source URL, or None on failure.
    """
    try:
        body: dict[str, Any] = {
            "name": funding_source_name,
            "plaidToken": plaid_token,
        }
        if on_demand_authorization_links:
            body["_links"] = {
                "on-demand-authorization": on_demand_authorization_links["self"],
            }

        client = dwolla_client.get_dwolla_client()
        response = await client.post(f"customers/{customer_id}/funding-sources", body)
        return _location(response)
    except Exception:
        logger.exception(
            "Creating a Dwolla funding source failed",
            extra={"action": "create_funding_source"},
        )
        return None


async def add_funding_source(
    dwolla_customer_id: str,
    processor_token: str,
    bank_name: str,
) -> str | None:
    """
    Attach a linked bank to a Dwolla customer.

    Returns:
        The funding source URL, or None on failure.
    """
    try:
        auth_links = await create_on_demand_authorization()
        if auth_links is None:
            raise VendorError("No on-demand authorization was created")

        return await create_funding_source(
            customer_id=dwolla_customer_id,
            funding_source_name=bank_name,
            plaid_token=processor_token,
            on_demand_authorization_links=auth_links,
        )
    except Exception:
        logger.exception("Adding a Dwolla funding source failed")
        return None


async def create_transfer(
    source_funding_source_url: str,
    destination_funding_source_url: str,
    amount_cents: int,
) -> str | None:
    """
    Move money between two funding sources.

    Returns:
        The transfer URL, or None on failure.
    """
    try:
        body = {
            "_links": {
                "source": {"href": source_funding_source_url},
                "destination": {"href": destination_funding_source_url},
            },
            "amount": {
                "currency": "USD",
                "value": format_amount(amount_cents),
            },
        }
        client = dwolla_client.get_dwolla_client()
        response = await client.post("transfers", body)
        return _location(response)
    except Exception:
        logger.exception("Creating a Dwolla transfer failed")
        return None
