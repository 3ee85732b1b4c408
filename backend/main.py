import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.prices import router as prices_router
from api.alerts import router as alerts_router
from api.stats import router as stats_router
from api.notifications import router as notifications_router
from alerts import AlertEvaluator, get_alert_evaluator
from core import get_settings, setup_logging
from db import AlertStore, get_alert_store
from services import PriceMonitor, get_price_monitor

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

FRONTEND_DIR = Path(settings.frontend_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting server in {settings.node_env} mode...")
    get_alert_store().ensure_storage()
    logger.info(f"Email notifications will be sent to: {settings.recipient or '(not configured)'}")

    monitor = get_price_monitor() if settings.monitor_enabled else None
    if monitor:
        monitor.start()
    yield
    if monitor and monitor.is_running:
        monitor.stop()

app = FastAPI(
    title="Crypto Price Alert API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )

app.include_router(prices_router, prefix="/api")
app.include_router(alerts_router, prefix="/api")
app.include_router(stats_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")

app.mount("/static", StaticFiles(directory=FRONTEND_DIR, check_dir=False), name="static")


@app.get("/", include_in_schema=False)
async def root():
    index = FRONTEND_DIR / "index.html"
    if not index.is_file():
        return JSONResponse(status_code=404, content={"success": False, "error": "Frontend not found"})
    return FileResponse(index)


@app.get("/health")
async def health(
    monitor: PriceMonitor = Depends(get_price_monitor),
    evaluator: AlertEvaluator = Depends(get_alert_evaluator),
    store: AlertStore = Depends(get_alert_store),
):
    alerts = store.list()
    return {
        "status": "healthy",
        "monitor": monitor.stats.to_dict(),
        "evaluator": evaluator.stats(),
        "alerts": {
            "total": len(alerts),
            "active": sum(1 for a in alerts if a.active),
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
