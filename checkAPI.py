#!/usr/bin/env python3
"""
MailTrust - Reputation API Connection Check
Calls the live reputation service for one address and prints the scored result

Usage:
    python checkAPI.py someone@example.com
"""

import sys
from pathlib import Path

# ===== ENVIRONMENT SETUP =====
def setup_environment():
    """Load environment and setup paths"""
    print("=" * 70)
    print("🔧 MailTrust - API Connection Check")
    print("=" * 70)

    project_root = Path(__file__).resolve().parent
    sys.path.insert(0, str(project_root))

    from dotenv import load_dotenv

    possible_env_paths = [
        project_root / '.env',
        Path.cwd() / '.env'
    ]

    for env_path in possible_env_paths:
        if env_path.exists():
            print(f"\n📂 Found .env file at: {env_path}")
            load_dotenv(dotenv_path=env_path, override=True)
            return

    print("\n⚠️  WARNING: No .env file found!")
    print("   Create a .env file in project root with:")
    print("   ABSTRACTAPI_KEY=your_key_here")

def check_api_key() -> bool:
    """Check if the reputation API key is configured"""
    from mailtrust.config import settings

    key = settings.ABSTRACTAPI_KEY
    if key:
        print(f"✅ AbstractAPI Key: Found (starts with {key[:4]}...)")
        return True

    print("❌ AbstractAPI Key: NOT FOUND")
    print("   Set ABSTRACTAPI_KEY in .env file")
    return False

def run_lookup(email: str) -> int:
    """Fetch and score one address; returns a process exit code"""
    from mailtrust.core.reputation_client import ReputationClient, VerificationError
    from mailtrust.core.reputation_scorer import ReputationScorer

    print("\n" + "=" * 70)
    print(f"🔍 Checking: {email}")
    print("=" * 70)

    try:
        payload = ReputationClient().fetch(email)
    except VerificationError as e:
        print(f"   ❌ FAILED: {e}")
        return 1

    result = ReputationScorer().score(payload, email)

    print(f"   ► Score: {result.score}/100")
    print(f"   ► Status: {result.status}")
    print(f"   ► Risk Level: {result.risk_level}")
    print(f"   ► Domain Age: {result.details.domain_age}")
    if result.provider_name:
        print(f"   ► Provider: {result.provider_name}")
    if result.details.smtp_unverifiable:
        print("   ► SMTP: provider blocks verification")

    if result.risk_factors:
        print("   ► Risk Factors:")
        for factor in result.risk_factors:
            print(f"      • [{factor.severity}] {factor.label}: {factor.description}")

    for breach in result.breaches:
        print(f"   ► Breach: {breach.domain} ({breach.date})")

    return 0

def main() -> int:
    if len(sys.argv) != 2:
        print(__doc__)
        return 2

    setup_environment()
    if not check_api_key():
        return 1
    return run_lookup(sys.argv[1])

if __name__ == "__main__":
    sys.exit(main())
