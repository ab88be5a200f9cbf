"""HTTP clients: ``http_client`` (async, httpx) and ``http_sync`` (requests)."""
