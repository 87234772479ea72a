"""
Aadhaar directory lookups and out-of-band seeding
"""
import logging
from typing import Iterable, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import PersistenceError
from ..models import DirectoryEntry
from ..utils.phone import normalize_phone
from ..utils.validation import is_valid_account_id

logger = logging.getLogger(__name__)


class DirectoryService:

    @staticmethod
    def find_by_account_id(db: Session, account_id: str) -> Optional[DirectoryEntry]:
        try:
            return db.query(DirectoryEntry).filter(DirectoryEntry.aadhaar == account_id).first()
        except SQLAlchemyError as e:
            logger.error(f"[Directory] Lookup failed: {e}", exc_info=True)
            raise PersistenceError("Identity directory is unavailable")

    @staticmethod
    def exists_account(db: Session, account_id: str) -> bool:
        return DirectoryService.find_by_account_id(db, account_id) is not None

    @staticmethod
    def upsert_entries(db: Session, rows: Iterable[dict]) -> Tuple[int, int, int]:
        """
        Load directory rows ({"aadhaar", "phone", "fullname"?}) out of band.

        Rows with a malformed Aadhaar number or phone are skipped.

        Returns:
            Tuple of (added, updated, skipped)
        """
        added = updated = skipped = 0
        for row in rows:
            aadhaar = str(row.get("aadhaar") or "").strip()
            if not is_valid_account_id(aadhaar):
                skipped += 1
                continue
            try:
                phone = normalize_phone(str(row.get("phone") or ""))
            except ValueError as e:
                logger.warning(f"[Directory] Skipping ...{aadhaar[-4:]}: {e}")
                skipped += 1
                continue

            full_name = row.get("fullname") or row.get("full_name")
            entry = DirectoryService.find_by_account_id(db, aadhaar)
            if entry is None:
                db.add(DirectoryEntry(aadhaar=aadhaar, phone=phone, full_name=full_name))
                db.flush()
                added += 1
            else:
                entry.phone = phone
                if full_name:
                    entry.full_name = full_name
                updated += 1
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[Directory] Seeding failed: {e}", exc_info=True)
            raise PersistenceError("Identity directory is unavailable")
        logger.info(f"[Directory] Seeded directory: added={added}, updated={updated}, skipped={skipped}")
        return added, updated, skipped
