# =======================================================================================
# fingerprint_bridge/__init__.py - Package Initialization
# =======================================================================================
"""
Fingerprint Bridge - Serial Sensor to Attendance System

Owns the serial link to the fingerprint sensor board, turns its line protocol
into attendance calls and live status events, and exposes a small HTTP
control plane with a Server-Sent-Events status stream.
"""

__version__ = "1.0.0"
__author__ = "Hotel HRIS Team"
