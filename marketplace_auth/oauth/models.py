# marketplace_auth/oauth/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union

from .state import OAuthState


class OAuthSecrets(BaseModel):
    """Credentials of the registered GitHub OAuth app."""
    client_id: str = Field(description="The OAuth app client identifier.")
    client_secret: str = Field(description="The OAuth app client secret.")
    redirect_uri: str = Field(description="Callback URL registered with the provider.")


class FlowSuccess(BaseModel):
    """Callback completed: an access token was issued."""
    model_config = ConfigDict(frozen=True)

    token: str
    state: Optional[OAuthState] = None
    purchases_synced: int = 0


class FlowFailure(BaseModel):
    """Callback failed. The reason is for the server log only."""
    model_config = ConfigDict(frozen=True)

    reason: str


FlowOutcome = Union[FlowSuccess, FlowFailure]
