from fastapi import APIRouter

router = APIRouter()

# Probes mounted outside the API prefix for load balancers
root_router = APIRouter()


@router.get("/health")
@root_router.get("/health")
@root_router.get("/healthz")
def health_check():
    """Liveness probe; does not touch the database."""
    return {"status": "ok"}
