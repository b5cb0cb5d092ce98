"""Integration tests for Microsoft Graph API connectivity.

These tests require real Azure credentials and are skipped in CI/CD unless
the OM_CLIENT_ID environment variable is set.
"""

import os

import pytest

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.getenv("OM_CLIENT_ID"),
        reason="Real Graph credentials not available",
    ),
]


@pytest.mark.asyncio
async def test_reconcile_once_real() -> None:
    """Run a full non-following reconciliation pass against the real drive."""
    from onedrive_mirror.config import load_config
    from onedrive_mirror.orchestration.pipeline import delta_engine_from_config, reconcile_once

    engine = delta_engine_from_config(load_config(), follow=False)
    actions = await reconcile_once(engine)

    assert isinstance(actions, list)
    assert all(action.id for action in actions)
