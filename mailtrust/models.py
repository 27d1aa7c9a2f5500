from sqlalchemy import Column, Integer, String, DateTime, JSON, Boolean
from datetime import datetime, timezone
from mailtrust.database import Base

class VerificationRecord(Base):
    """Snapshot of one scoring run. Rows are appended, never updated."""
    __tablename__ = "verification_history"
    
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), nullable=False, index=True)
    
    # Scoring Outcome
    score = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, index=True)
    risk_level = Column(String(20), nullable=False)
    
    # Check Details
    syntax_valid = Column(Boolean, nullable=False)
    mx_records = Column(Boolean, nullable=False)
    disposable = Column(Boolean, nullable=False)
    smtp_valid = Column(Boolean, nullable=False)
    smtp_unverifiable = Column(Boolean, nullable=False, default=False)
    spam_trap = Column(Boolean, nullable=False)
    domain_age = Column(String(50), nullable=False)
    
    risk_factors = Column(JSON, default=list)
    breaches = Column(JSON, default=list)
    provider_name = Column(String(255), nullable=True)
    
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False, index=True)
