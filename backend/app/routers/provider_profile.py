# backend/app/routers/provider_profile.py

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_provider
from ..database import get_db
from ..models.generated import Providers
from ..schemas.providers import ProviderContactUpdate, ProviderRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/provider", tags=["provider"])


@router.get("/me", response_model=ProviderRead)
def get_me(provider: Providers = Depends(get_current_provider)):
    return provider


@router.patch("/me", response_model=ProviderRead)
def update_contacts(
    data: ProviderContactUpdate,
    provider: Providers = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    """Update contact numbers. Name and slug are fixed at creation."""
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(provider, field, value or None)

    db.commit()
    db.refresh(provider)

    logger.info(f"Provider {provider.id} contacts updated: {sorted(changes)}")
    return provider
