import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List
from datetime import datetime, timezone

from mailtrust.database import get_db
from mailtrust.schemas import HistoryEntry, VerificationResult, VerifyRequest
from mailtrust.services.verification_service import VerificationService
from mailtrust.core.reputation_client import ReputationClient, VerificationError
from mailtrust.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

def get_reputation_client() -> ReputationClient:
    """Dependency so tests can swap the upstream client"""
    return ReputationClient()

# ============================================================================
# VERIFICATION ENDPOINTS
# ============================================================================

@router.post("/verify", response_model=VerificationResult)
def verify_email(
    request: VerifyRequest,
    db: Session = Depends(get_db),
    client: ReputationClient = Depends(get_reputation_client)
):
    """Verify an email address against the reputation service"""
    service = VerificationService(db, client)
    try:
        return service.verify_email(request.email)
    except VerificationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception(f"❌ Email verification error: {e}")
        raise HTTPException(status_code=500, detail="Failed to verify email")

@router.get("/history", response_model=List[HistoryEntry])
def verification_history(
    limit: int = Query(settings.HISTORY_DEFAULT_LIMIT, ge=1, le=settings.HISTORY_MAX_LIMIT),
    db: Session = Depends(get_db)
):
    """List the most recent verifications, newest first"""
    try:
        records = VerificationService(db, client=None).recent_verifications(limit)
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to fetch verification history: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch history")
    return [HistoryEntry.from_record(r) for r in records]

@router.get("/health")
def health_check():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc), "service": settings.APP_NAME}
