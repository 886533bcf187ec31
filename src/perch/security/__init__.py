"""Security utilities — password hashing and audit events.

Password hashing::

    from perch.security import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

from perch.security.audit import SecurityEvent, emit_security_event, set_security_event_sink
from perch.security.passwords import hash_password, verify_password

__all__ = [
    "SecurityEvent",
    "emit_security_event",
    "hash_password",
    "set_security_event_sink",
    "verify_password",
]
