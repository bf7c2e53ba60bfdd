# marketplace_auth/oauth/state.py
import logging
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

STATE_COOKIE_NAME = "state"
STATE_DELIMITER = ","

# Marker appended to the state when the login was started from the app
APP_ORIGIN_MARKER = "fromapp"
APP_ORIGIN_QUERY_VALUE = "app"


def _new_random_id() -> str:
    # Canonical UUID4 text is hex digits and dashes only, never the delimiter
    return str(uuid.uuid4())


class OAuthState(BaseModel):
    """
    Anti-forgery state carried through the `state` cookie and the provider's
    redirect back. Serialized as `<random_id>` or `<random_id>,<origin_marker>`.
    """
    model_config = ConfigDict(frozen=True)

    random_id: str = Field(default_factory=_new_random_id)
    origin_marker: Optional[str] = None

    def encode(self) -> str:
        if self.origin_marker:
            return f"{self.random_id}{STATE_DELIMITER}{self.origin_marker}"
        return self.random_id

    @classmethod
    def decode(cls, raw: Optional[str]) -> Optional["OAuthState"]:
        """Parse a serialized state. Returns None for a missing or empty value."""
        if not raw:
            return None
        # Only the second field is the marker; anything after it is ignored
        parts = raw.split(STATE_DELIMITER)
        marker = parts[1] if len(parts) > 1 else None
        return cls(random_id=parts[0], origin_marker=marker or None)

    @property
    def is_from_app(self) -> bool:
        return self.origin_marker == APP_ORIGIN_MARKER


def origin_marker_from_request(from_param: Optional[str]) -> Optional[str]:
    """Map the Setup `from` query parameter to an origin marker."""
    if from_param == APP_ORIGIN_QUERY_VALUE:
        return APP_ORIGIN_MARKER
    return None


def generate_state(origin_marker: Optional[str] = None) -> OAuthState:
    """Mint a fresh state token, optionally tagged with an origin marker."""
    if origin_marker and STATE_DELIMITER in origin_marker:
        raise ValueError(f"Origin marker may not contain '{STATE_DELIMITER}': {origin_marker!r}")
    return OAuthState(origin_marker=origin_marker)


def validate_state(state_from_cookie: Optional[str], state_from_query: Optional[str]) -> bool:
    """
    True only when both values are present, non-empty and identical.
    Mismatches are logged with both values and reported as False.
    """
    if not state_from_cookie:
        logger.error("state cookie is missing")
        return False
    if not state_from_query:
        logger.error(f"state query parameter is missing (cookie: {state_from_cookie!r})")
        return False
    if state_from_cookie.encode("utf-8") != state_from_query.encode("utf-8"):
        logger.error(f"state mismatch: {state_from_cookie!r} !== {state_from_query!r}")
        return False
    return True
