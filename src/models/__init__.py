from models.database import Base, SessionLocal, get_db, init_db
from models.domain import CigarRecord, FieldCounter, RecordContributor

__all__ = [
    "Base",
    "SessionLocal",
    "get_db",
    "init_db",
    "CigarRecord",
    "FieldCounter",
    "RecordContributor",
]
