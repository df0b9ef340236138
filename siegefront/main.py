"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from siegefront.config import get_settings
from siegefront.middleware.error_handler import setup_error_handlers
from siegefront.api.routes import battle

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("siegefront")

app = FastAPI(
    title="Tasern Siegefront",
    description="Turn-based tactical card battles against personality-driven AI",
    version="0.1.0",
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.debug(f"[REQUEST] {request.method} {request.url.path}")
    response = await call_next(request)
    logger.debug(f"[RESPONSE] {request.method} {request.url.path} -> {response.status_code}")
    return response

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",  # Vite
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_error_handlers(app, debug=settings.DEBUG)


@app.get("/")
async def root():
    return {"status": "online", "game": "Tasern Siegefront", "version": "0.1.0"}


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "debug_mode": settings.DEBUG,
        "grid": {"rows": settings.GRID_ROWS, "cols": settings.GRID_COLS},
    }


app.include_router(battle.router, prefix="/api/battle", tags=["battle"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("siegefront.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
