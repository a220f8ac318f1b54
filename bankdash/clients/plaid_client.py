"""
Plaid API client construction.

The Plaid Python SDK is synchronous. Service actions call it through
fastapi.concurrency.run_in_threadpool so a slow Plaid response never
blocks the event loop.

The client is built lazily and cached: importing this module does not
require Plaid credentials, and tests replace get_plaid_client() with a
mock.
"""

import logging
from functools import lru_cache

import plaid
from plaid.api import plaid_api

from bankdash.config import settings

logger = logging.getLogger(__name__)


PLAID_HOSTS = {
    "sandbox": plaid.Environment.Sandbox,
    "production": plaid.Environment.Production,
}


@lru_cache
def get_plaid_client() -> plaid_api.PlaidApi:
    """Return the process-wide Plaid API client."""
    configuration = plaid.Configuration(
        host=PLAID_HOSTS[settings.PLAID_ENV],
        api_key={
            "clientId": settings.PLAID_CLIENT_ID,
            "secret": settings.PLAID_SECRET,
        },
    )
    logger.info("Initialized Plaid client for %s environment", settings.PLAID_ENV)
    return plaid_api.PlaidApi(plaid.ApiClient(configuration))
