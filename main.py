import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# HTTP client libraries are noisy at DEBUG
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# ✅ middlewares
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ routers
from routers import admin, auth, dashboard, master_data, student, teacher

from database.db import SessionLocal
from database.schema import create_all
from services.master_data_service import ensure_default_admin

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

# ✅ CORS (dashboard front-end origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ request latency (X-Latency-Ms) + access log
app.add_middleware(TimingMiddleware)

# ✅ global error handlers (uniform JSON error body)
add_error_handlers(app)

# ✅ JSON API under /api
app.include_router(auth.router,        prefix="/api")
app.include_router(student.router,     prefix="/api")
app.include_router(teacher.router,     prefix="/api")
app.include_router(admin.router,       prefix="/api")
app.include_router(master_data.router, prefix="/api")

# ✅ dashboard shell at /
app.include_router(dashboard.router)


# ✅ health check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running", "env": settings.ENV}


@app.on_event("startup")
def _prepare_database():
    # production schemas are managed by scripts/init_db.py
    if settings.ENV not in ("dev", "stage"):
        return
    create_all()
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()
    logger.info(f"database ready ({settings.DB_DRIVER})")
