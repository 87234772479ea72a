from fastapi import APIRouter, Request

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(request: Request):
    """Liveness check; reports whether the session sweep is running"""
    store = getattr(request.app.state, "session_store", None)
    return {
        "success": True,
        "message": "Good!",
        "session_sweep_running": store is not None and store.running,
    }
