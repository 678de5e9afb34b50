# market/services/base.py
# Common service plumbing: the injected session and the per-operation transaction boundary.
import functools
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market.core.errors import MarketError, StorageError

logger = logging.getLogger(__name__)


class BaseService:
    """Services receive the request's session explicitly, there is no global DB handle."""

    def __init__(self, db: Session):
        self.db = db


def transactional(failure_message: str):
    """
    Wraps a service method in one transaction.

    Commits when the method returns, rolls back on any exception.
    Business errors propagate unchanged; SQLAlchemy errors are logged with the
    traceback and replaced by StorageError(failure_message) so raw driver
    messages never reach the client.
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            try:
                result = method(self, *args, **kwargs)
                self.db.commit()
                return result
            except MarketError:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"{failure_message}: {e}", exc_info=True)
                raise StorageError(failure_message) from e
            except Exception:
                self.db.rollback()
                raise
        return wrapper
    return decorator
