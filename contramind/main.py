from fastapi import FastAPI

import contramind.core.logging  # noqa: F401
from contramind.api.v1.api import api_router, monitoring_router
from contramind.core.config import settings

app = FastAPI(title=settings.PROJECT_NAME)


@app.get("/healthz", tags=["health"])
def root_health() -> dict[str, str]:
    """Basic health endpoint."""
    return {"status": "ok"}


app.include_router(api_router, prefix="/api/v1")
app.include_router(monitoring_router, prefix="/api")
