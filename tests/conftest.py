"""
Pytest configuration for Quality Audit tests.

Test Tier System:
- fast (default): Pure unit tests, all I/O mocked
- medium: API TestClient, aiohttp session mocks, background threads
- slow: Live Intercom / database runs

Run tiers:
- pytest                          # Fast only (default, quick feedback)
- pytest -m medium                # Medium only
- pytest -m "not slow"            # Fast + Medium (pre-merge)
- pytest -m slow                  # Slow only
- pytest --override-ini="addopts=" -v   # Full suite (all tiers)

Note: Unmarked tests are auto-assigned to 'fast' tier. To add a new test:
- No marker needed for fast (unit) tests
- Add @pytest.mark.medium for API TestClient tests
- Add @pytest.mark.slow for live Intercom / database tests
- Tests marked @pytest.mark.integration (without tier) default to 'medium'

Credential Safety:
- Fast/medium tests force-set a fake INTERCOM_ACCESS_TOKEN and clear
  AUDIT_API_KEY so a missed mock can never reach the real workspace
- Only slow tests (and full suite) keep real credentials from the environment
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

FAKE_INTERCOM_TOKEN = "test-intercom-token"


# =============================================================================
# Tier Auto-Assignment
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """
    Automatically assign tier markers to unmarked tests.

    Tests are fast by default unless explicitly marked as medium or slow.
    Tests marked @pytest.mark.integration (but no tier) are assigned to
    'medium'.
    """
    for item in items:
        has_tier = (
            list(item.iter_markers(name='fast')) or
            list(item.iter_markers(name='medium')) or
            list(item.iter_markers(name='slow'))
        )
        if has_tier:
            continue

        # Skip if test is marked as skip (don't assign tier to skipped tests)
        if list(item.iter_markers(name='skip')):
            continue

        if list(item.iter_markers(name='integration')):
            item.add_marker(pytest.mark.medium)
            continue

        item.add_marker(pytest.mark.fast)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings."""
    markexpr = getattr(config.option, 'markexpr', '') or ''

    # Real credentials are ONLY allowed when slow tests are being run:
    # 1. Running slow tests explicitly: -m slow
    # 2. Running full suite: --override-ini="addopts=" (markexpr empty)
    includes_slow_tests = (
        not markexpr or
        (
            'slow' in markexpr and
            'not slow' not in markexpr
        )
    )

    if includes_slow_tests:
        os.environ.setdefault("INTERCOM_ACCESS_TOKEN", FAKE_INTERCOM_TOKEN)
    else:
        os.environ["INTERCOM_ACCESS_TOKEN"] = FAKE_INTERCOM_TOKEN
        os.environ.pop("AUDIT_API_KEY", None)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def project_root():
    """Return project root path (session-scoped for efficiency)."""
    return PROJECT_ROOT


@pytest.fixture
def admin_part():
    """Factory for an admin-authored conversation part."""
    def _make(author_id="8742044", created_at=1762741000, part_id=None, author_type="admin"):
        return {
            "type": "conversation_part",
            "id": part_id or f"p-{author_id}-{created_at}",
            "part_type": "comment",
            "body": "Thanks for reaching out!",
            "created_at": created_at,
            "author": {"type": author_type, "id": author_id, "name": "Agent"},
        }
    return _make


@pytest.fixture
def make_conversation():
    """Factory for a hydrated conversation in the API's default wrapped shape."""
    def _make(conv_id="1001", parts=None, created_at=1762740500, updated_at=1762745000):
        return {
            "type": "conversation",
            "id": conv_id,
            "state": "closed",
            "created_at": created_at,
            "updated_at": updated_at,
            "source": {
                "subject": "",
                "body": "Hi, I need help",
                "author": {"type": "user", "id": "u1", "name": "Client", "email": "client@example.com"},
            },
            "conversation_parts": {
                "type": "conversation_part.list",
                "conversation_parts": list(parts or []),
                "total_count": len(parts or []),
            },
        }
    return _make
