"""Identity API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.modules.identity.schemas import Caller, CallerRead
from app.modules.identity.service import get_current_caller

router = APIRouter(prefix="/identity", tags=["identity"])


@router.get("/me", response_model=CallerRead)
async def get_me(current_caller: Caller = Depends(get_current_caller)) -> CallerRead:
    """Return identity and role of authenticated caller."""
    return CallerRead.model_validate(current_caller)
