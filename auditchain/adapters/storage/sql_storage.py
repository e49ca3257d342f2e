"""
SQL Storage Backend for AuditChain.

This module keeps the chain state in a relational database using SQLAlchemy.
Each save runs in a single transaction; conditional saves compare the stored
rows with the expected map inside that same transaction.
"""

import logging
from typing import Mapping, Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, scoped_session

from auditchain.adapters.storage.base import ConditionalStateStore
from auditchain.adapters.storage.models import Base, ChainStateModel
from auditchain.core.exceptions import StateLoadError, StateSaveError

logger = logging.getLogger(__name__)


class SqlStateStore(ConditionalStateStore):
    """
    Chain state store backed by a SQL database.
    """

    def __init__(self, connection_string: str = "sqlite:///auditchain.db", scope: str = "default"):
        """
        Initialize the SQL state store.

        Args:
            connection_string: SQL connection string (e.g., sqlite:///auditchain.db)
            scope: Name separating independent chains in the same database
        """
        self.db_url = connection_string
        self.scope = scope
        self.engine = create_engine(self.db_url, echo=False)

        Base.metadata.create_all(self.engine)

        self.Session = scoped_session(sessionmaker(bind=self.engine))

        logger.info(f"SqlStateStore initialized with {self.engine.url.render_as_string(hide_password=True)}")

    def get(self) -> Optional[dict[str, str]]:
        session = self.Session()
        try:
            rows = session.query(ChainStateModel).filter_by(scope=self.scope).all()
            return {row.key: row.value for row in rows} or None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read chain state for scope {self.scope}: {e}")
            raise StateLoadError(f"Cannot read chain state from database: {e}") from e
        finally:
            session.close()

    def set(self, mapping: Mapping[str, str]) -> None:
        session = self.Session()
        try:
            self._write(session, mapping)
            session.commit()
            logger.debug(f"Stored chain state for scope {self.scope}")
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to write chain state for scope {self.scope}: {e}")
            raise StateSaveError(f"Cannot write chain state to database: {e}") from e
        finally:
            session.close()

    def compare_and_set(self, expected: Optional[Mapping[str, str]], mapping: Mapping[str, str]) -> bool:
        session = self.Session()
        try:
            rows = (session.query(ChainStateModel)
                    .filter_by(scope=self.scope)
                    .with_for_update()
                    .all())
            current = {row.key: row.value for row in rows}
            if current != dict(expected or {}):
                session.rollback()
                logger.warning(f"Chain state for scope {self.scope} changed since it was read")
                return False
            self._write(session, mapping)
            session.commit()
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to write chain state for scope {self.scope}: {e}")
            raise StateSaveError(f"Cannot write chain state to database: {e}") from e
        finally:
            session.close()

    def _write(self, session, mapping: Mapping[str, str]) -> None:
        for key, value in mapping.items():
            session.merge(ChainStateModel(scope=self.scope, key=key, value=value))

    def close(self) -> None:
        """Close connection pool."""
        self.Session.remove()
        self.engine.dispose()
