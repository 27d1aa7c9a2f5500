import re
import math
from typing import List, Optional, Tuple

from mailtrust.schemas import (
    Breach,
    ReputationPayload,
    RiskFactor,
    VerificationDetails,
    VerificationResult,
)

# --- Static lookup tables ---
SUSPICIOUS_DOMAIN_WORDS: Tuple[str, ...] = (
    'fake', 'temp', 'trash', 'spam', 'disposable', 'throwaway',
    'mailinator', 'guerrilla', 'sharklasers', 'trashmail', 'tempmail',
    'yopmail', 'getairmail', 'fakeinbox', 'burner', 'anonymous',
)

SUSPICIOUS_USERNAME_PATTERNS: Tuple[re.Pattern, ...] = tuple(
    re.compile(p, flags) for p, flags in (
        (r'^test', re.I), (r'^user\d+', re.I), (r'^admin', re.I), (r'^demo', re.I),
        (r'^sample', re.I), (r'^fake', re.I), (r'^temp', re.I), (r'^null', re.I),
        (r'^example', re.I), (r'^noreply', re.I), (r'^asdf', re.I), (r'^qwerty', re.I),
        (r'^12345', 0), (r'^abc123', re.I),
    )
)

# Providers that refuse SMTP probing, so an unknown SMTP result is expected
MAJOR_PROVIDERS = frozenset({
    'gmail.com', 'googlemail.com',
    'yahoo.com', 'yahoo.co.uk', 'yahoo.fr', 'yahoo.de', 'yahoo.co.in', 'yahoo.co.jp',
    'outlook.com', 'hotmail.com', 'live.com', 'msn.com',
    'icloud.com', 'me.com', 'mac.com',
    'aol.com',
    'protonmail.com', 'proton.me',
    'zoho.com', 'mail.com',
    'gmx.com', 'gmx.net',
    'yandex.com', 'yandex.ru',
})

# Thresholds shared by status and risk level
SAFE_THRESHOLD = 70
RISKY_THRESHOLD = 40

BASE_SCORE = 50
CHECK_BONUS = 15
SMTP_UNVERIFIABLE_BONUS = 10

PENALTIES = {
    'smtp_invalid': 25,
    'mx_invalid': 30,
    'undeliverable': 20,
    'unknown_deliverability': 15,
    'catchall': 10,
    'role': 5,
    'medium_risk': 10,
    'high_risk': 20,
    'heavy_breach': 20,
}

FACTOR_PENALTIES = {
    'suspicious_domain': 50,
    'danger': 30,
    'warning': 15,
    'info': 0,
}

HEAVY_BREACH_COUNT = 10
MODERATE_BREACH_COUNT = 3
LOW_QUALITY_SCORE = 0.3


def split_email(email: str) -> Tuple[str, str, str]:
    """Return (username, domain, domain label) for an address; missing parts are ''"""
    username, _, domain = (email or '').partition('@')
    domain = domain.strip().lower()
    return username, domain, domain.split('.')[0]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ReputationScorer:
    """
    Turns an email reputation payload into a trust score, a status, a risk
    level and an ordered list of risk factors.

    Stateless: one instance can serve any number of concurrent requests.
    """

    def score(self, payload: ReputationPayload, email: Optional[str] = None) -> VerificationResult:
        """Run every stage and assemble the final result"""
        address = payload.email_address or email or ''
        _, domain, _ = split_email(address)

        risk_factors = self.detect_risk_factors(payload, address)
        score = self.calculate_score(payload, risk_factors, address)
        status = self.determine_status(score, payload, risk_factors)
        risk_level = self.determine_risk_level(score)

        deliverability = payload.deliverability
        quality = payload.quality

        details = VerificationDetails(
            syntax_valid=deliverability.is_format_valid is True,
            mx_records=deliverability.is_mx_valid is True,
            disposable=quality.is_disposable is True,
            smtp_valid=deliverability.is_smtp_valid is True,
            smtp_unverifiable=self.is_smtp_unverifiable(payload, domain),
            spam_trap=quality.is_catchall is True,
            domain_age=self.estimate_domain_age(payload),
        )

        breaches = tuple(
            Breach(domain=b.domain, date=b.breach_date)
            for b in (payload.breaches.breached_domains or [])
        )

        return VerificationResult(
            score=score,
            status=status,
            risk_level=risk_level,
            details=details,
            risk_factors=tuple(risk_factors),
            breaches=breaches,
            provider_name=payload.sender.email_provider_name,
        )

    # ------------------------------------------------------------------
    # Risk factor detection
    # ------------------------------------------------------------------

    def detect_risk_factors(self, payload: ReputationPayload, email: str) -> List[RiskFactor]:
        """
        Evaluate every rule independently and collect the ones that fire.

        Factors come back in rule order; nothing is sorted or de-duplicated.
        """
        username, domain, domain_label = split_email(email)
        quality = payload.quality
        risk = payload.risk
        factors: List[RiskFactor] = []

        # 1. Suspicious words in the domain label
        matched_word = next((w for w in SUSPICIOUS_DOMAIN_WORDS if w in domain_label), None)
        if matched_word:
            factors.append(RiskFactor(
                severity='danger',
                label='Suspicious Domain',
                description=(
                    f"The domain '{domain}' contains '{matched_word}', a term associated "
                    f"with disposable or fake email services"
                ),
            ))

        # 2. Placeholder / test usernames
        if username and any(p.search(username) for p in SUSPICIOUS_USERNAME_PATTERNS):
            factors.append(RiskFactor(
                severity='info',
                label='Uncommon Username',
                description=(
                    f"The username '{username}' matches a pattern often used for "
                    f"test or placeholder accounts"
                ),
            ))

        # 3. Upstream username flag
        if quality.is_username_suspicious is True:
            factors.append(RiskFactor(
                severity='info',
                label='Unusual Username',
                description=f"The reputation service flagged the username '{username}' as unusual",
            ))

        # 4-5. Address risk tier
        if risk.address_risk_status == 'high':
            factors.append(RiskFactor(
                severity='danger',
                label='High Risk Address',
                description=self._high_risk_description(payload),
            ))
        elif risk.address_risk_status == 'medium':
            factors.append(RiskFactor(
                severity='info',
                label='Medium Risk Classification',
                description='The reputation service rated this address as medium risk',
            ))

        # 6. Breaches
        breach_count = payload.breaches.total_breaches or 0
        if breach_count > 0:
            if breach_count > HEAVY_BREACH_COUNT:
                severity, exposure = 'danger', 'significant'
            elif breach_count > MODERATE_BREACH_COUNT:
                severity, exposure = 'warning', 'moderate'
            else:
                severity, exposure = 'warning', 'some'
            noun = 'breach' if breach_count == 1 else 'breaches'
            factors.append(RiskFactor(
                severity=severity,
                label='Data Breaches',
                description=(
                    f"This email was found in {breach_count} known data {noun}, "
                    f"indicating {exposure} exposure"
                ),
            ))

        # 7. Disposable
        if quality.is_disposable is True:
            factors.append(RiskFactor(
                severity='danger',
                label='Disposable Email',
                description='This address belongs to a disposable email service and is likely temporary',
            ))

        # 8. Role account
        if quality.is_role is True:
            factors.append(RiskFactor(
                severity='warning',
                label='Role-Based Email',
                description=(
                    f"'{username}' is a role-based address, usually shared by a team "
                    f"rather than owned by one person"
                ),
            ))

        # 9. Catch-all (already covered by the high risk description)
        if quality.is_catchall is True and risk.address_risk_status != 'high':
            factors.append(RiskFactor(
                severity='warning',
                label='Catch-All Domain',
                description=(
                    f"The domain '{domain}' accepts mail for any address, so the mailbox "
                    f"cannot be confirmed to exist"
                ),
            ))

        # 10. Free provider
        if quality.is_free_email is True:
            provider = payload.sender.email_provider_name
            description = (
                f"This address uses {provider}, a free email provider" if provider
                else "This address uses a free email provider"
            )
            factors.append(RiskFactor(
                severity='info',
                label='Free Email Provider',
                description=description,
            ))

        # 11. SPF
        if quality.is_spf_strict is False and quality.is_dmarc_enforced is True:
            factors.append(RiskFactor(
                severity='info',
                label='SPF Not Strict',
                description="The domain enforces DMARC but its SPF policy is not strict",
            ))

        return factors

    def _high_risk_description(self, payload: ReputationPayload) -> str:
        quality = payload.quality
        reasons = []

        if quality.score is not None and quality.score < LOW_QUALITY_SCORE:
            reasons.append(f"Very low quality score ({_round_half_up(quality.score * 100)}%)")
        if payload.deliverability.status == 'unknown':
            reasons.append("Deliverability could not be confirmed")
        if quality.is_catchall is True:
            reasons.append("Domain accepts mail for any address (catch-all)")
        if quality.is_free_email is True and payload.risk.domain_risk_status == 'low':
            provider = payload.sender.email_provider_name or 'the free email provider'
            reasons.append(f"Address is high risk even though {provider} itself is low risk")

        if not reasons:
            return "The reputation service classified this address as high risk based on its activity and reputation signals"
        return "; ".join(reasons)

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def is_smtp_unverifiable(self, payload: ReputationPayload, domain: str) -> bool:
        """SMTP result unknown for a provider known to block verification"""
        return payload.deliverability.is_smtp_valid is None and domain in MAJOR_PROVIDERS

    def calculate_score(self, payload: ReputationPayload, risk_factors: List[RiskFactor],
                        email: str = '') -> int:
        deliverability = payload.deliverability
        quality = payload.quality
        risk = payload.risk
        _, domain, _ = split_email(payload.email_address or email)

        score = BASE_SCORE
        if quality.score is not None:
            score = _round_half_up(quality.score * 100)
        else:
            if deliverability.is_format_valid is True:
                score += CHECK_BONUS
            if deliverability.is_mx_valid is True:
                score += CHECK_BONUS
            if deliverability.is_smtp_valid is True:
                score += CHECK_BONUS

        if self.is_smtp_unverifiable(payload, domain):
            score += SMTP_UNVERIFIABLE_BONUS

        # --- Deterministic penalties ---
        if deliverability.is_smtp_valid is False:
            score -= PENALTIES['smtp_invalid']
        if deliverability.is_mx_valid is False:
            score -= PENALTIES['mx_invalid']
        if deliverability.status == 'undeliverable':
            score -= PENALTIES['undeliverable']
        elif deliverability.status == 'unknown':
            score -= PENALTIES['unknown_deliverability']
        if quality.is_catchall is True:
            score -= PENALTIES['catchall']
        if quality.is_role is True:
            score -= PENALTIES['role']
        if risk.address_risk_status == 'medium':
            score -= PENALTIES['medium_risk']
        elif risk.address_risk_status == 'high':
            score -= PENALTIES['high_risk']
        if (payload.breaches.total_breaches or 0) > HEAVY_BREACH_COUNT:
            score -= PENALTIES['heavy_breach']

        # --- Per-factor penalties (stack on the ones above) ---
        for factor in risk_factors:
            if factor.severity == 'danger' and factor.label == 'Suspicious Domain':
                score -= FACTOR_PENALTIES['suspicious_domain']
            else:
                score -= FACTOR_PENALTIES[factor.severity]

        return max(0, min(100, score))

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def determine_status(self, score: int, payload: ReputationPayload,
                         risk_factors: List[RiskFactor]) -> str:
        if payload.deliverability.status == 'undeliverable':
            return "invalid"

        if any(f.severity == 'danger' for f in risk_factors):
            return "risky"
        if sum(1 for f in risk_factors if f.severity in ('warning', 'danger')) > 1:
            return "risky"

        if score >= SAFE_THRESHOLD:
            return "safe"
        elif score >= RISKY_THRESHOLD:
            return "risky"
        else:
            return "invalid"

    def determine_risk_level(self, score: int) -> str:
        if score >= SAFE_THRESHOLD:
            return "Low"
        elif score >= RISKY_THRESHOLD:
            return "Medium"
        else:
            return "High"

    def estimate_domain_age(self, payload: ReputationPayload) -> str:
        """Bucket the domain age; falls back to provider heuristics when absent"""
        domain_age_days = payload.domain.domain_age
        if domain_age_days:
            years = int(domain_age_days) // 365
            if years >= 10:
                return "> 10 years"
            if years >= 5:
                return "5-10 years"
            if years >= 2:
                return "2-5 years"
            if years >= 1:
                return "1-2 years"
            return "< 1 year"

        quality = payload.quality
        if quality.is_free_email is True:
            return "> 10 years"
        if quality.is_disposable is True:
            return "< 1 month"
        return "Unknown"
