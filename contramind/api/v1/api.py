from fastapi import APIRouter

from contramind.api.v1.endpoints import (
    admin,
    auth,
    chat,
    contracts,
    knowledge,
    monitoring,
    prompts,
    subscription,
    support,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(contracts.router, prefix="/contracts", tags=["contracts"])
api_router.include_router(chat.router, prefix="/ai", tags=["ai"])
api_router.include_router(knowledge.router, prefix="/knowledge", tags=["knowledge"])
api_router.include_router(subscription.router, prefix="/subscription", tags=["subscription"])
api_router.include_router(subscription.webhook_router, prefix="/payments", tags=["payments"])
api_router.include_router(support.router, prefix="/support", tags=["support"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(prompts.router, prefix="/prompts", tags=["prompts"])

# Served outside the versioned prefix at /api/health and /api/rum.
monitoring_router = monitoring.router
