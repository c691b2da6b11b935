from fastapi import Depends
from sqlmodel import Session, create_engine
from app.core.config import Settings
from app.services.record_store import RecordStore

settings = Settings()
engine = create_engine(settings.database_url, echo=settings.sql_echo)

def get_session():
    with Session(engine) as session:
        yield session

def get_store(session: Session = Depends(get_session)) -> RecordStore:
    return RecordStore(session)
