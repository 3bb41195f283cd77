"""
Wire models for the QingLong open API.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class Envelope(BaseModel):
    """Uniform response wrapper: {code, message?, data}."""

    model_config = ConfigDict(extra="ignore")

    code: int
    message: Optional[str] = None
    data: Any = None


class LoginResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: str
    token_type: Optional[str] = None
    # Read as seconds of validity from the time of login, not as an absolute
    # epoch timestamp. A panel that sends absolute timestamps gives a far-future
    # expiry, so the token is kept after the panel has already expired it.
    expiration: int


class EnvironmentVariable(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    value: str = ""
    status: Optional[int] = None
    remarks: Optional[str] = None


class UpdateEnvRequest(BaseModel):
    id: int
    name: str
    value: str


class Credentials(BaseModel):
    """QingLong application credentials, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    client_id: str
    client_secret: str
