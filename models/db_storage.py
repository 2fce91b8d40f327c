from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from models.base_model import Base
from models.user import User
from models.refresh_token import RefreshToken

# Map model names for easy querying
classes = {
    "User": User,
    "RefreshToken": RefreshToken
}

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class DBStorage:
    __engine = None
    __session = None

    def __init__(self, database_url, echo=False):
        """Initialize engine from the configured database URL"""
        if database_url in _MEMORY_URLS:
            # One shared connection, otherwise every checkout sees an empty database
            self.__engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.__engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

        # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
        if self.__engine.url.get_backend_name() == "sqlite":
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    def reload(self):
        """Create tables and start session"""
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        Session = scoped_session(session_factory)
        self.__session = Session

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        if cls in classes.values():
            return self.__session.get(cls, id)
        return None

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    def dispose(self):
        """Drop every pooled connection"""
        self.close()
        self.__engine.dispose()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session
