from pydantic import BaseModel
from typing import Any, Dict, Optional


class ProfileUpdate(BaseModel):
    """Fields of a profile save. ``None`` means the field was not sent."""
    full_name: Optional[str] = None
    description: Optional[str] = None
    email: Optional[str] = None
    primary_phone: Optional[str] = None
    secondary_phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    logo_initials: Optional[str] = None
    open_to_work: Optional[Any] = None
    currenttheme: Optional[str] = None
    themes: Optional[Any] = None
    skills: Optional[Any] = None
    experiences: Optional[Any] = None


class ProfileEnvelope(BaseModel):
    profile: Optional[Dict[str, Any]] = None


class PortfolioTokenResponse(BaseModel):
    success: bool = True
    token: str


class ResumeDownloadResponse(BaseModel):
    url: str
    expires_in: int
