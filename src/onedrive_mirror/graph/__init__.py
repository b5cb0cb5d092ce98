"""Microsoft Graph collaborators: HTTP client, delta feed, item lookups."""
