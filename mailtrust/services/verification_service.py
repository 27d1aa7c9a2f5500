import logging
from typing import List, Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from mailtrust.core.reputation_client import ReputationClient
from mailtrust.core.reputation_scorer import ReputationScorer
from mailtrust.models import VerificationRecord
from mailtrust.schemas import VerificationResult
from mailtrust.config import settings

logger = logging.getLogger(__name__)

class VerificationService:
    def __init__(self, db: Session, client: Optional[ReputationClient] = None):
        self.db = db
        self.client = client or ReputationClient()
        self.scorer = ReputationScorer()

    def verify_email(self, email: str) -> VerificationResult:
        """Fetch reputation data, score it and record the result"""
        # Client errors propagate: nothing is scored or saved
        payload = self.client.fetch(email)

        result = self.scorer.score(payload, email)
        logger.info(
            f"✓ Verified {email} - score={result.score} status={result.status} "
            f"risk={result.risk_level} factors={len(result.risk_factors)}"
        )

        self._save_verification(email, result)
        return result

    def recent_verifications(self, limit: int = None) -> List[VerificationRecord]:
        """Most recent stored verifications, newest first"""
        limit = limit or settings.HISTORY_DEFAULT_LIMIT
        return (
            self.db.query(VerificationRecord)
            .order_by(desc(VerificationRecord.created_at), desc(VerificationRecord.id))
            .limit(limit)
            .all()
        )

    def _save_verification(self, email: str, result: VerificationResult) -> Optional[VerificationRecord]:
        """Best-effort write; a storage failure never fails the verification"""
        details = result.details
        record = VerificationRecord(
            email=email,
            score=result.score,
            status=result.status,
            risk_level=result.risk_level,
            syntax_valid=details.syntax_valid,
            mx_records=details.mx_records,
            disposable=details.disposable,
            smtp_valid=details.smtp_valid,
            smtp_unverifiable=details.smtp_unverifiable,
            spam_trap=details.spam_trap,
            domain_age=details.domain_age,
            risk_factors=[f.model_dump(by_alias=True) for f in result.risk_factors],
            breaches=[b.model_dump() for b in result.breaches],
            provider_name=result.provider_name,
        )

        try:
            self.db.add(record)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Database error (non-blocking): {e}")
            return None

        return record
