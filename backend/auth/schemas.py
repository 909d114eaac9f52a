from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenPair(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    token_type: Optional[str] = None
    scope: Optional[str] = None
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None


class RefreshedToken(BaseModel):
    access_token: str
