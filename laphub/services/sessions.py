import secrets
from typing import MutableMapping

SESSION_KEY = "sid"


def ensure_session_id(session: MutableMapping) -> str:
    """Return the opaque id stored in the cookie session, minting one if absent."""
    session_id = session.get(SESSION_KEY)
    if not session_id:
        session_id = secrets.token_urlsafe(24)
        session[SESSION_KEY] = session_id
    return session_id
