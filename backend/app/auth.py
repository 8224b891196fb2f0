# backend/app/auth.py
"""
Provider identity for the provider API.

The identity is opaque to this service: whatever sits in front of it
(login page, gateway) puts the provider id into X-Provider-Id. No cookies,
no ambient session state; every provider endpoint depends on
get_current_provider explicitly.
"""

import logging

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .database import get_db
from .models.generated import Providers
from .services.errors import Unauthorized

logger = logging.getLogger(__name__)


def get_current_provider(
    x_provider_id: str | None = Header(None),
    db: Session = Depends(get_db),
) -> Providers:
    if not x_provider_id:
        raise Unauthorized()

    try:
        provider_id = int(x_provider_id)
    except ValueError:
        raise Unauthorized() from None

    provider = db.get(Providers, provider_id)
    if not provider:
        logger.warning(f"Unknown provider identity: {provider_id}")
        raise Unauthorized()

    return provider
