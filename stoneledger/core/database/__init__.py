from stoneledger.core.database.session import async_session, engine, get_db
from stoneledger.core.database.base import Base, BaseModel, new_id

__all__ = ["async_session", "engine", "get_db", "Base", "BaseModel", "new_id"]
