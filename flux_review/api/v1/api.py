from fastapi import APIRouter

from flux_review.api.v1.endpoints import health
from flux_review.api.v1.endpoints import points
from flux_review.api.v1.endpoints import reviewers
from flux_review.api.v1.endpoints import seed

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(points.router, tags=["points"])
api_router.include_router(seed.router, prefix="/seed", tags=["seed"])
api_router.include_router(reviewers.router, prefix="/reviewers", tags=["reviewers"])
