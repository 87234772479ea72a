"""
Account persistence
"""
import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import AccountExistsError, PersistenceError
from ..models import Account

logger = logging.getLogger(__name__)


class AccountService:

    @staticmethod
    def insert(db: Session, account: Account) -> Account:
        """
        Persist a new account and return it with its generated ids.

        Raises:
            AccountExistsError: a unique key (aadhaar, username, provider id) is taken
            PersistenceError: the store could not complete the write
        """
        try:
            db.add(account)
            db.commit()
            db.refresh(account)
            return account
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"[Accounts] Unique constraint rejected account ...{account.aadhaar_no[-4:]}: {e.orig}")
            raise AccountExistsError()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[Accounts] Insert failed: {e}", exc_info=True)
            raise PersistenceError()

    @staticmethod
    def find_by_account_id(db: Session, account_id: str) -> Optional[Account]:
        try:
            return db.query(Account).filter(Account.aadhaar_no == account_id).first()
        except SQLAlchemyError as e:
            logger.error(f"[Accounts] Lookup failed: {e}", exc_info=True)
            raise PersistenceError()

    @staticmethod
    def find_by_id(db: Session, public_id: str) -> Optional[Account]:
        try:
            return db.query(Account).filter(Account.public_id == public_id).first()
        except SQLAlchemyError as e:
            logger.error(f"[Accounts] Lookup failed: {e}", exc_info=True)
            raise PersistenceError()
