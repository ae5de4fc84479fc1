"""Pydantic models for web API request/response validation."""

from pydantic import BaseModel, Field


class SelectNetworkRequest(BaseModel):
    """Request body for picking a listed network."""

    essid: str = Field(min_length=1)


class CredentialsRequest(BaseModel):
    """Request body for joining a listed protected network."""

    essid: str = Field(min_length=1)
    password: str = ""


class HiddenNetworkRequest(BaseModel):
    """Request body for joining a hidden network.

    Neither field is checked: the values are forwarded as typed.
    """

    essid: str = ""
    password: str = ""


class ActionResponse(BaseModel):
    """Response for an action queued on the portal."""

    accepted: bool = True
    message: str = ""
