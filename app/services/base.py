import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import ConcurrentUpdateError


class BaseService:
    """Shared session handling for service-layer classes."""

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    def commit(self):
        """
        Commit the unit of work. Any failure rolls everything back. A version
        conflict, or a unique row (such as a first-use ledger) inserted by a
        concurrent writer, is surfaced as ConcurrentUpdateError.
        """
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            self._logger.warning(f"Concurrent update detected: {e}")
            raise ConcurrentUpdateError() from e
        except IntegrityError as e:
            self.db.rollback()
            self._logger.warning(f"Concurrent insert detected: {e.orig}")
            raise ConcurrentUpdateError() from e
        except Exception:
            self.db.rollback()
            raise
