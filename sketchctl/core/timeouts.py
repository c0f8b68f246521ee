"""Timeout defaults shared by the API client and the storage transfer engine."""

# Seconds for JSON calls to the sketch API
DEFAULT_HTTP_TIMEOUT_SECONDS = 30

# Seconds for a single storage PUT (large images over slow links)
DEFAULT_TRANSFER_TIMEOUT_SECONDS = 600
