from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.modules.payment.api import router as payment_router
from app.modules.subscription.api import router as subscription_router
from app.modules.cards.api import router as cards_router
from app.core.database import db_manager
from app.core.global_error_handler import register_global_exception_handlers
from app.core.config import settings

app = FastAPI(
    title="Festiva API",
    description="Festive greeting cards with a premium subscription paid through AbacatePay.",
    version="1.0.0"
)

# Register global exception handlers
register_global_exception_handlers(app)

@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections on shutdown."""
    await db_manager.close()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# Include routers
app.include_router(payment_router, prefix="/api")
app.include_router(subscription_router, prefix="/api")
app.include_router(cards_router, prefix="/api")

@app.get("/api/")
async def root():
    return {"message": f"{settings.APP_NAME} API is running"}

@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}
