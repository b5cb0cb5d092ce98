"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing.
    """

    # Required — no defaults, fail at startup if missing
    client_id: str
    client_secret: str
    tenant_id: str
    drive_user: str

    # Optional; an empty connection string disables cursor persistence
    storage_connection_string: str = ""
    delta_container: str = "onedrive-mirror-state"
    delta_blob: str = "delta-token/current.txt"
    poll_interval_seconds: float = 30.0
    request_timeout_seconds: float = 60.0


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        OM_CLIENT_ID: Azure AD application (client) ID.
        OM_CLIENT_SECRET: Azure AD application client secret.
        OM_TENANT_ID: Azure AD tenant ID.
        OM_DRIVE_USER: UPN or object ID of the OneDrive user to mirror.

    Optional environment variables (with defaults):
        OM_STORAGE_CONNECTION_STRING: Azure Storage connection string used to
            persist the delta cursor (default: unset, cursor kept in memory).
        OM_DELTA_CONTAINER: Blob container for delta token storage.
        OM_DELTA_BLOB: Blob path for the delta token file.
        OM_POLL_INTERVAL_SECONDS: Delay between delta polls (default: 30).
        OM_REQUEST_TIMEOUT_SECONDS: Graph request timeout (default: 60).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        client_id=os.environ["OM_CLIENT_ID"],
        client_secret=os.environ["OM_CLIENT_SECRET"],
        tenant_id=os.environ["OM_TENANT_ID"],
        drive_user=os.environ["OM_DRIVE_USER"],
        storage_connection_string=os.environ.get("OM_STORAGE_CONNECTION_STRING", ""),
        delta_container=os.environ.get("OM_DELTA_CONTAINER", "onedrive-mirror-state"),
        delta_blob=os.environ.get("OM_DELTA_BLOB", "delta-token/current.txt"),
        poll_interval_seconds=float(os.environ.get("OM_POLL_INTERVAL_SECONDS", "30")),
        request_timeout_seconds=float(os.environ.get("OM_REQUEST_TIMEOUT_SECONDS", "60")),
    )
