# =======================================================================================
# fingerprint_bridge/clients/__init__.py - Client Flows Package
# =======================================================================================
from .bridge_client import BridgeClient, parse_event, parse_sse_data
from .hris_client import HrisClient
from .enrollment_flow import EnrollmentFlow, infer_outcome
from .two_factor_flow import TwoFactorFlow

__all__ = [
    "BridgeClient", "HrisClient", "EnrollmentFlow", "TwoFactorFlow",
    "infer_outcome", "parse_event", "parse_sse_data",
]
