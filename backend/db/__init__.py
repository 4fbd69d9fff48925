from .session import get_db, engine, SessionLocal, Base
from .models import Lead, RentRoll

__all__ = ["get_db", "engine", "SessionLocal", "Base", "Lead", "RentRoll"]
