"""Internal Pydantic models for Firestore REST and Identity Toolkit responses."""

from pydantic import BaseModel, Field


class _Document(BaseModel):
    name: str
    fields: dict = Field(default_factory=dict)
    createTime: str | None = None
    updateTime: str | None = None


class _ListDocumentsResponse(BaseModel):
    documents: list[_Document] = Field(default_factory=list)
    nextPageToken: str | None = None


class _SignUpResponse(BaseModel):
    idToken: str
    refreshToken: str
    expiresIn: int = 3600


class _RefreshTokenResponse(BaseModel):
    id_token: str
    refresh_token: str
    expires_in: int = 3600
