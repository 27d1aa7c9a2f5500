import requests
import logging
from typing import Optional
from pydantic import ValidationError

from mailtrust.config import settings
from mailtrust.schemas import ReputationPayload

logger = logging.getLogger(__name__)


class VerificationError(Exception):
    """Base class for failures that stop a verification before scoring"""


class ServiceNotConfiguredError(VerificationError):
    """No API key is configured for the reputation service"""


class ReputationServiceError(VerificationError):
    """The reputation service failed or answered with a non-2xx status"""


class InvalidReputationResponse(ReputationServiceError):
    """The reputation service answered with a body we cannot parse"""


class ReputationClient:
    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None,
                 timeout: Optional[int] = None, session: Optional[requests.Session] = None):
        """
        Client for the AbstractAPI email reputation endpoint

        Args:
            api_key: Service credential (defaults to ABSTRACTAPI_KEY)
            api_url: Endpoint URL (defaults to REPUTATION_API_URL)
            timeout: Request timeout in seconds
            session: Optional pre-built HTTP session
        """
        self.api_key = api_key if api_key is not None else settings.ABSTRACTAPI_KEY
        self.api_url = api_url or settings.REPUTATION_API_URL
        self.timeout = timeout or settings.REPUTATION_API_TIMEOUT

        # Reuse TCP connections across lookups
        self.http_session = session or requests.Session()
        self.http_session.headers.update({'User-Agent': f'MailTrust/{settings.VERSION}'})

    def fetch(self, email: str) -> ReputationPayload:
        """
        Look up the reputation of one email address

        Args:
            email: Address to look up

        Returns:
            Parsed reputation payload

        Raises:
            ServiceNotConfiguredError: no API key, nothing was sent
            ReputationServiceError: network failure or non-2xx status
            InvalidReputationResponse: body is not a JSON reputation record
        """
        if not self.api_key:
            logger.error("❌ ABSTRACTAPI_KEY not found in environment")
            raise ServiceNotConfiguredError("Email verification service not configured")

        logger.info(f"📡 Calling reputation API for email: {email}")
        try:
            response = self.http_session.get(
                self.api_url,
                params={'api_key': self.api_key, 'email': email},
                timeout=self.timeout
            )
        except requests.Timeout as e:
            logger.warning("⚠️ Reputation API request timeout")
            raise ReputationServiceError("Email verification service error") from e
        except requests.RequestException as e:
            # Exception text embeds the full request URL, api_key included
            logger.error(f"❌ Reputation API request failed: {type(e).__name__} ({self.api_url})")
            raise ReputationServiceError("Email verification service error") from e

        logger.info(f"Reputation API response status: {response.status_code}")

        if not response.ok:
            logger.error(f"❌ Reputation API error response ({response.status_code}): {response.text}")
            raise ReputationServiceError("Email verification service error")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"❌ Failed to parse reputation API response: {response.text}")
            raise InvalidReputationResponse("Invalid response from verification service") from e

        if not isinstance(data, dict):
            logger.error(f"❌ Unexpected reputation API payload: {data!r}")
            raise InvalidReputationResponse("Invalid response from verification service")

        try:
            return ReputationPayload.model_validate(data)
        except ValidationError as e:
            logger.error(f"❌ Reputation API payload failed validation: {e}")
            raise InvalidReputationResponse("Invalid response from verification service") from e
