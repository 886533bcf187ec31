"""Authentication — credential store, session principals and the auth gate.

Names are resolved lazily: ``perch.auth.gate`` depends on the principal
middleware, which in turn imports ``perch.auth.store``.
"""

__all__ = [
    "ANONYMOUS",
    "AnonymousUser",
    "AuthGate",
    "AuthResult",
    "CredentialStore",
    "MemoryCredentialStore",
    "PrincipalResolver",
    "User",
]


def __getattr__(name: str) -> object:
    if name in ("AuthGate", "AuthResult"):
        from perch.auth import gate as _gate

        return getattr(_gate, name)

    if name == "PrincipalResolver":
        from perch.auth.principal import PrincipalResolver

        return PrincipalResolver

    if name in ("ANONYMOUS", "AnonymousUser", "CredentialStore", "MemoryCredentialStore", "User"):
        from perch.auth import store as _store

        return getattr(_store, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
