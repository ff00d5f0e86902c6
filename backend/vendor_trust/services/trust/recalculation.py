"""
Score Recalculation Service

The authoritative trust score, tier and last-update timestamp are computed by
a server-side SQL function. This module only invokes it. The function may also
flip trust_recovery_active and set trust_score_last_drop_reason when it detects
a drop.
"""
import os
import re
import logging
from typing import Protocol

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ExternalServiceError

logger = logging.getLogger(__name__)

RECALC_FUNCTION = os.getenv("TRUST_RECALC_FUNCTION", "update_vendor_trust_score")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class ScoreRecalculationService(Protocol):
    def recalculate(self, vendor_id: str) -> None:
        """Recompute the authoritative score. Raises ExternalServiceError on failure."""
        ...


class DatabaseRecalculationService:
    """
    Calls the recalculation function inside the caller's session, so the call
    commits or rolls back together with the rest of the action.
    """

    def __init__(self, db_session: Session, function_name: str = RECALC_FUNCTION):
        if not _IDENTIFIER.match(function_name):
            raise ValueError(f"Invalid recalculation function name: {function_name!r}")
        self.db = db_session
        self.function_name = function_name

    def recalculate(self, vendor_id: str) -> None:
        try:
            self.db.execute(
                text(f"SELECT {self.function_name}(:vendor_uuid)"),
                {"vendor_uuid": vendor_id},
            )
        except SQLAlchemyError as e:
            logger.error(f"Trust score recalculation failed for vendor {vendor_id}: {e}")
            raise ExternalServiceError("recalculate", vendor_id, e) from e

        logger.info(f"Trust score recalculated for vendor {vendor_id}")
