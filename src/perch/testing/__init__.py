"""Test utilities for perch applications.

    from perch.testing import TestClient, extract_cookie
"""

from perch.testing.client import TestClient


def extract_cookie(response, name: str = "perch_session") -> str | None:
    """Extract a Set-Cookie value from response headers."""
    for hname, hvalue in response.headers:
        if hname == "set-cookie" and hvalue.startswith(f"{name}="):
            return hvalue.split(";")[0].partition("=")[2]
    return None


__all__ = ["TestClient", "extract_cookie"]
