"""Endpoint configuration for sandbox-deployments library."""

import os
from typing import Optional

from .constants import DEFAULT_PXE_URL, PXE_URL_ENV


def get_default_endpoint() -> str:
    """
    Get the endpoint selected by the environment.

    Returns:
        Value of $PXE_URL, or http://localhost:8080 when unset or empty
    """
    return os.environ.get(PXE_URL_ENV) or DEFAULT_PXE_URL


def resolve_endpoint(url: Optional[str] = None) -> str:
    """
    Resolve the service endpoint URL.

    Args:
        url: Explicit endpoint (takes precedence over the environment)

    Returns:
        Endpoint URL without trailing slash
    """
    if url is None:
        url = get_default_endpoint()

    return url.rstrip("/")
