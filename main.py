# src/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from auth.routes import router as auth_router
from subscription.routes import router as subscription_router
from payment.routes import router as payment_router
from admin.routes import router as admin_router
from foodspot.routes import router as foodspot_router
from review.routes import router as review_router
from vote.routes import router as vote_router
from scheduler.tasks import start_scheduler, sweep_expired_subscriptions, reconcile_entitlements
from config import settings
from errors import AppError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Food Spot Backend",
    description="API for food spot discovery with premium subscriptions",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(subscription_router)
app.include_router(payment_router)
app.include_router(admin_router)
app.include_router(foodspot_router)
app.include_router(review_router)
app.include_router(vote_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail} ({exc.context})")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.on_event("startup")
def startup_event():
    """Run initial tasks on startup."""
    sweep_expired_subscriptions()
    reconcile_entitlements()
    app.state.scheduler = start_scheduler()


@app.on_event("shutdown")
def shutdown_event():
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None and scheduler.running:
        scheduler.shutdown()


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Welcome to Food Spot Backend!"}
