"""
Reputation API client tests (HTTP session mocked)
"""

import logging
import pytest
import requests
from unittest.mock import MagicMock

from mailtrust.core.reputation_client import (
    InvalidReputationResponse,
    ReputationClient,
    ReputationServiceError,
    ServiceNotConfiguredError,
)

API_URL = "https://reputation.example.com/v1/"

SAMPLE_RESPONSE = {
    "email_address": "jane@gmail.com",
    "email_deliverability": {
        "status": "deliverable",
        "status_detail": "valid_email",
        "is_format_valid": True,
        "is_smtp_valid": None,
        "is_mx_valid": True,
        "mx_records": ["gmail-smtp-in.l.google.com"],
    },
    "email_quality": {
        "score": "0.80",
        "is_free_email": True,
        "is_username_suspicious": False,
        "is_disposable": False,
        "is_catchall": False,
        "is_subaddress": False,
        "is_role": False,
        "is_dmarc_enforced": True,
        "is_spf_strict": True,
        "minimum_age": None,
    },
    "email_sender": {"email_provider_name": "Google", "first_name": None},
    "email_domain": {"domain": "gmail.com", "domain_age": 10995, "is_live_site": True},
    "email_risk": {"address_risk_status": "low", "domain_risk_status": "low"},
    "email_breaches": {"total_breaches": 0, "breached_domains": []},
    "unexpected_section": {"ignored": True},
}


def make_response(status_code=200, body=None, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = "body"
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = body
    return response


def make_client(response=None, api_key="secret-key"):
    session = MagicMock()
    if isinstance(response, Exception):
        session.get.side_effect = response
    else:
        session.get.return_value = response
    return ReputationClient(api_key=api_key, api_url=API_URL, timeout=5, session=session), session


def test_fetch_parses_payload():
    client, session = make_client(make_response(body=SAMPLE_RESPONSE))

    payload = client.fetch("jane@gmail.com")

    session.get.assert_called_once_with(
        API_URL,
        params={"api_key": "secret-key", "email": "jane@gmail.com"},
        timeout=5,
    )
    assert payload.email_address == "jane@gmail.com"
    assert payload.quality.score == 0.8
    assert payload.deliverability.is_smtp_valid is None
    assert payload.sender.email_provider_name == "Google"
    assert payload.domain.domain_age == 10995


def test_missing_key_fails_before_network_call():
    client, session = make_client(make_response(body=SAMPLE_RESPONSE), api_key="")

    with pytest.raises(ServiceNotConfiguredError) as exc:
        client.fetch("jane@gmail.com")

    assert str(exc.value) == "Email verification service not configured"
    session.get.assert_not_called()


@pytest.mark.parametrize("status_code", [400, 401, 429, 500, 503])
def test_non_2xx_is_service_error(status_code):
    client, _ = make_client(make_response(status_code=status_code, body={"error": "nope"}))

    with pytest.raises(ReputationServiceError) as exc:
        client.fetch("jane@gmail.com")

    assert not isinstance(exc.value, InvalidReputationResponse)
    assert str(exc.value) == "Email verification service error"


@pytest.mark.parametrize("error", [
    requests.ConnectionError("refused"),
    requests.Timeout("slow"),
])
def test_network_failure_is_service_error(error):
    client, _ = make_client(error)

    with pytest.raises(ReputationServiceError):
        client.fetch("jane@gmail.com")


def test_unparseable_body_is_invalid_response():
    client, _ = make_client(make_response(json_error=True))

    with pytest.raises(InvalidReputationResponse) as exc:
        client.fetch("jane@gmail.com")

    assert str(exc.value) == "Invalid response from verification service"


@pytest.mark.parametrize("body", [
    ["not", "an", "object"],
    {"email_quality": {"score": "very good"}},
])
def test_malformed_payload_is_invalid_response(body):
    client, _ = make_client(make_response(body=body))

    with pytest.raises(InvalidReputationResponse):
        client.fetch("jane@gmail.com")


def test_empty_object_is_a_valid_payload():
    client, _ = make_client(make_response(body={}))

    payload = client.fetch("jane@gmail.com")

    assert payload.email_address is None
    assert payload.quality.score is None


def test_connection_error_does_not_log_api_key(caplog):
    error = requests.ConnectionError(
        "HTTPConnectionPool(host='127.0.0.1', port=9): Max retries exceeded with url: "
        "/v1/?api_key=SUPERSECRETKEY&email=jane%40example.com"
    )
    client, _ = make_client(error, api_key="SUPERSECRETKEY")

    with caplog.at_level(logging.DEBUG):
        with pytest.raises(ReputationServiceError):
            client.fetch("jane@example.com")

    assert "SUPERSECRETKEY" not in caplog.text
    assert "ConnectionError" in caplog.text


@pytest.mark.parametrize("body", [
    {"email_domain": {"domain_age": float("nan")}},
    {"email_quality": {"score": float("nan")}},
    {"email_quality": {"score": float("inf")}},
    {"email_domain": {"domain_age": float("-inf")}},
])
def test_non_finite_numbers_are_invalid_response(body):
    client, _ = make_client(make_response(body=body))

    with pytest.raises(InvalidReputationResponse):
        client.fetch("jane@gmail.com")
