"""Shared constants for routeguard.

The marker header and the rejection contract are defined here once.
No literal header names or status codes in other modules — import from here.
"""

# ─── Marker Header ────────────────────────────────────────────────────────────

# Internal signal between the mark step and the enforce step.
# MUST NEVER appear in a response that reaches the client: the gate strips every
# instance before letting a response through.
MARKER_HEADER_NAME: str = "Whitelisted"
MARKER_HEADER_VALUE: str = "yes"

# ASGI header names are lowercase bytes.
MARKER_HEADER_RAW_NAME: bytes = MARKER_HEADER_NAME.lower().encode("latin-1")
MARKER_HEADER_RAW_VALUE: bytes = MARKER_HEADER_VALUE.encode("latin-1")

# ─── Rejection Contract ───────────────────────────────────────────────────────

# 501 Not Implemented — the route exists but has not been whitelisted.
REJECTION_STATUS_CODE: int = 501
REJECTION_BODY: str = "Request not whitelisted"

# Policy name reported in rejection logs.
WHITELIST_POLICY: str = "whitelist"
