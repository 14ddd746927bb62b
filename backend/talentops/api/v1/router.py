"""API v1 router aggregator.

All v1 endpoint routers are included here.
"""

from fastapi import APIRouter

from talentops.api.v1 import candidates

router = APIRouter()

router.include_router(candidates.router, prefix="/candidates", tags=["candidates"])
