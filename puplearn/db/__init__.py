from puplearn.db.database import get_engine, get_session_factory, init_db, session_scope

__all__ = ["get_engine", "get_session_factory", "init_db", "session_scope"]
