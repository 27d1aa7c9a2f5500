from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from mailtrust.config import settings

def _engine_options(url: str) -> dict:
    # SQLite connections are shared across the threadpool; no sizing knobs
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}

engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    """Dependency for FastAPI routes"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    """Create the verification history table if it does not exist"""
    # Models must be imported so they register with 'Base'
    import mailtrust.models  
    
    Base.metadata.create_all(bind=bind or engine)
