from sqlalchemy import create_engine               # SQLAlchemy engine factory
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import settings

# SQLite needs check_same_thread off because FastAPI runs sync routes in a threadpool
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)

# session factory used by every request
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# declarative base shared by all models
Base = declarative_base()


# ==========================================================
# [common] per-request DB session
# ==========================================================
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
