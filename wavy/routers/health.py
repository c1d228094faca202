# wavy/routers/health.py

from fastapi import APIRouter

from ..services.tokens import utcnow

router = APIRouter(tags=["Health"])


@router.get("/health")
def health():
    return {"status": "ok", "timestamp": utcnow().isoformat()}
