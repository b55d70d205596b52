"""Canonical request and response datagrams for testing."""

from __future__ import annotations

# ============================================================================
# End-to-end scenarios
# ============================================================================

ADD_REQUEST = b'{"jsonrpc":"2.0","id":1,"method":"Math.Add","params":{"A":2,"B":3}}'
ADD_RESPONSE = b'{"jsonrpc":"2.0","id":1,"result":5,"error":{"code":0,"message":""}}'

UNREGISTERED_REQUEST = (
    b'{"jsonrpc":"2.0","id":2,"method":"Math.Subtract","params":{}}'
)

TRUNCATED_REQUEST = b'{"jsonrpc":"2.0","id":3,"method":"Math.Add","par'


# ============================================================================
# Malformed envelopes
# ============================================================================

MALFORMED_REQUESTS = [
    b"",
    b"not json",
    b"\xff\xfe",
    b"[1, 2, 3]",
    b'"Math.Add"',
    b"null",
    b'{"id": 1, "method": "Math.Add", "params": {}}',
    b'{"jsonrpc": "1.0", "id": 1, "method": "Math.Add", "params": {}}',
    b'{"jsonrpc": 2.0, "id": 1, "method": "Math.Add", "params": {}}',
    b'{"jsonrpc": "2.0", "id": "1", "method": "Math.Add", "params": {}}',
    b'{"jsonrpc": "2.0", "id": 1.5, "method": "Math.Add", "params": {}}',
    b'{"jsonrpc": "2.0", "id": true, "method": "Math.Add", "params": {}}',
    b'{"jsonrpc": "2.0", "id": 1, "params": {}}',
    b'{"jsonrpc": "2.0", "id": 1, "method": null, "params": {}}',
    b'{"jsonrpc": "2.0", "id": 1, "method": 42, "params": {}}',
]

# Nesting too deep for the JSON decoder, within the datagram size limit
DEEPLY_NESTED_REQUESTS = [
    b"[" * 8000,
    b"[" * 4000 + b"]" * 4000,
]
