SERVER_STARTED: str = "Started listening for datagrams on %s:%s."
SERVER_STOPPED: str = "Stopped listening for datagrams on %s:%s."
DATAGRAM_RECEIVED: str = "Received %d bytes from %s."
RECEIVE_FAILED: str = "Failed to receive datagram: %s"
SEND_FAILED: str = "Failed to send response to %s: %s"
INVALID_JSON_RPC_VERSION: str = "Invalid JSON-RPC version! Expected '2.0', got '%s'."
PARSE_FAILED: str = "Failed to decode request from %s: %s"
RPC_METHOD_CALL_START: str = "Calling the '%s' method with RPC ID #%s."
RPC_METHOD_CALL_PARAMS: str = "RPC ID #%s params: %s"
RPC_METHOD_CALL_END: str = "RPC ID #%s for method '%s' processed with result: %s."
RPC_METHOD_CALL_FAILED: str = "RPC ID #%s for method '%s' failed: %s"
ENCODE_FAILED: str = "Failed to encode response for RPC ID #%s: %s"
SERVICE_REGISTERED: str = "Registered service '%s' with methods: %s"
METHOD_SKIPPED: str = "Skipping '%s.%s': %s"
REQUEST_REJECTED: str = "Rejected RPC ID #%s for method '%s': %s"
SIGNAL_HANDLER_FAILED: str = "Signal receiver %r failed: %s"
REQUEST_SENT: str = "Sent RPC ID #%s for method '%s' to %s:%s."
RESPONSE_MALFORMED: str = "Ignoring malformed response from %s: %s"
RESPONSE_UNMATCHED: str = "Ignoring response for RPC ID #%s from %s."
INTROSPECTION_FAILED: str = "Failed to introspect method %s: %s"
