from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Tuple, Literal
from datetime import datetime

# ==========================================
# 📡 REPUTATION PAYLOAD (upstream JSON)
# ==========================================
# Every field is optional: a missing value means "unknown", which the
# scorer keeps distinct from an explicit False.

class DeliverabilityInfo(BaseModel):
    status: Optional[str] = None
    status_detail: Optional[str] = None
    is_format_valid: Optional[bool] = None
    is_smtp_valid: Optional[bool] = None
    is_mx_valid: Optional[bool] = None
    mx_records: Optional[List[str]] = None

class QualityInfo(BaseModel):
    score: Optional[float] = None
    is_free_email: Optional[bool] = None
    is_username_suspicious: Optional[bool] = None
    is_disposable: Optional[bool] = None
    is_catchall: Optional[bool] = None
    is_subaddress: Optional[bool] = None
    is_role: Optional[bool] = None
    is_dmarc_enforced: Optional[bool] = None
    is_spf_strict: Optional[bool] = None
    minimum_age: Optional[int] = None

    class Config:
        allow_inf_nan = False

class RiskInfo(BaseModel):
    address_risk_status: Optional[str] = None
    domain_risk_status: Optional[str] = None

class BreachedDomain(BaseModel):
    domain: Optional[str] = None
    breach_date: Optional[str] = None

class BreachInfo(BaseModel):
    total_breaches: Optional[int] = None
    date_first_breached: Optional[str] = None
    date_last_breached: Optional[str] = None
    breached_domains: Optional[List[BreachedDomain]] = None

class DomainInfo(BaseModel):
    domain: Optional[str] = None
    domain_age: Optional[float] = None
    is_live_site: Optional[bool] = None
    registrar: Optional[str] = None
    is_risky_tld: Optional[bool] = None

    class Config:
        allow_inf_nan = False

class SenderInfo(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_provider_name: Optional[str] = None
    organization_name: Optional[str] = None

class ReputationPayload(BaseModel):
    """Normalized view of an AbstractAPI email reputation response"""
    email_address: Optional[str] = None
    email_deliverability: Optional[DeliverabilityInfo] = None
    email_quality: Optional[QualityInfo] = None
    email_risk: Optional[RiskInfo] = None
    email_breaches: Optional[BreachInfo] = None
    email_domain: Optional[DomainInfo] = None
    email_sender: Optional[SenderInfo] = None

    # Empty groups stand in for absent ones so rules can read fields directly
    @property
    def deliverability(self) -> DeliverabilityInfo:
        return self.email_deliverability or DeliverabilityInfo()

    @property
    def quality(self) -> QualityInfo:
        return self.email_quality or QualityInfo()

    @property
    def risk(self) -> RiskInfo:
        return self.email_risk or RiskInfo()

    @property
    def breaches(self) -> BreachInfo:
        return self.email_breaches or BreachInfo()

    @property
    def domain(self) -> DomainInfo:
        return self.email_domain or DomainInfo()

    @property
    def sender(self) -> SenderInfo:
        return self.email_sender or SenderInfo()

# ==========================================
# 📤 VERIFICATION RESULT
# ==========================================

Severity = Literal["info", "warning", "danger"]
Status = Literal["safe", "risky", "invalid"]
RiskLevel = Literal["Low", "Medium", "High"]

class RiskFactor(BaseModel):
    severity: Severity = Field(alias="type")
    label: str
    description: str

    class Config:
        frozen = True
        populate_by_name = True

class Breach(BaseModel):
    domain: Optional[str] = None
    date: Optional[str] = None

    class Config:
        frozen = True

class VerificationDetails(BaseModel):
    syntax_valid: bool = Field(alias="syntaxValid")
    mx_records: bool = Field(alias="mxRecords")
    disposable: bool
    smtp_valid: bool = Field(alias="smtpValid")
    smtp_unverifiable: bool = Field(alias="smtpUnverifiable")
    spam_trap: bool = Field(alias="spamTrap")
    domain_age: str = Field(alias="domainAge")

    class Config:
        frozen = True
        populate_by_name = True

class VerificationResult(BaseModel):
    """Output of one scoring run; created once and never modified"""
    score: int = Field(ge=0, le=100)
    status: Status
    risk_level: RiskLevel = Field(alias="riskLevel")
    details: VerificationDetails
    risk_factors: Tuple[RiskFactor, ...] = Field(default=(), alias="riskFactors")
    breaches: Tuple[Breach, ...] = ()
    provider_name: Optional[str] = Field(default=None, alias="providerName")

    class Config:
        frozen = True
        populate_by_name = True

# ==========================================
# 📥 INPUT MODELS
# ==========================================

class VerifyRequest(BaseModel):
    email: EmailStr

# ==========================================
# 🗂️ HISTORY
# ==========================================

class HistoryEntry(BaseModel):
    """Schema for a stored verification, as listed by /history"""
    id: int
    email: str
    score: int
    status: str
    risk_level: str = Field(alias="riskLevel")
    details: VerificationDetails
    risk_factors: List[RiskFactor] = Field(default=[], alias="riskFactors")
    breaches: List[Breach] = []
    provider_name: Optional[str] = Field(default=None, alias="providerName")
    created_at: datetime = Field(alias="createdAt")

    class Config:
        populate_by_name = True

    @classmethod
    def from_record(cls, record) -> "HistoryEntry":
        return cls(
            id=record.id,
            email=record.email,
            score=record.score,
            status=record.status,
            risk_level=record.risk_level,
            details=VerificationDetails(
                syntax_valid=record.syntax_valid,
                mx_records=record.mx_records,
                disposable=record.disposable,
                smtp_valid=record.smtp_valid,
                smtp_unverifiable=bool(record.smtp_unverifiable),
                spam_trap=record.spam_trap,
                domain_age=record.domain_age,
            ),
            risk_factors=record.risk_factors or [],
            breaches=record.breaches or [],
            provider_name=record.provider_name,
            created_at=record.created_at,
        )
