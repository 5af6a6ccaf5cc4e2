from fastapi import APIRouter, Depends, File, Form, UploadFile
from app.config.settings import settings
from app.core.dependencies import CurrentUser, allow_public, get_token_service, require_user, verify_token
from app.core.security import TokenService
from app.database.supabase_client import get_supabase
from app.modules.profiles.schemas import (
    PortfolioTokenResponse, ProfileEnvelope, ProfileUpdate, ResumeDownloadResponse
)
from app.modules.profiles.service import ProfileService
from app.modules.profiles.storage import get_object_storage
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/profile", tags=["profile"])


def get_profile_service(
    supabase: Client = Depends(get_supabase),
    storage=Depends(get_object_storage),
) -> ProfileService:
    return ProfileService(supabase, storage, settings.resume_signed_url_expiry)


def profile_form(
    name: Optional[str] = Form(None),
    full_name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    primaryPhone: Optional[str] = Form(None),
    primary_phone: Optional[str] = Form(None),
    secondaryPhone: Optional[str] = Form(None),
    secondary_phone: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    linkedin: Optional[str] = Form(None),
    github: Optional[str] = Form(None),
    openToWork: Optional[str] = Form(None),
    open_to_work: Optional[str] = Form(None),
    logo_initials: Optional[str] = Form(None),
    currenttheme: Optional[str] = Form(None),
    themes: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    experiences: Optional[str] = Form(None),
) -> ProfileUpdate:
    """Collect multipart profile fields; camelCase names are accepted as aliases"""
    return ProfileUpdate(
        full_name=full_name if full_name is not None else name,
        description=description,
        email=email,
        primary_phone=primaryPhone if primaryPhone is not None else primary_phone,
        secondary_phone=secondaryPhone if secondaryPhone is not None else secondary_phone,
        location=location,
        website=website,
        linkedin=linkedin,
        github=github,
        open_to_work=openToWork if openToWork is not None else open_to_work,
        logo_initials=logo_initials,
        currenttheme=currenttheme,
        themes=themes,
        skills=skills,
        experiences=experiences,
    )


@router.get("/token", response_model=PortfolioTokenResponse)
async def portfolio_token(tokens: TokenService = Depends(get_token_service)):
    """Read-only token for the public portfolio profile"""
    return PortfolioTokenResponse(token=tokens.issue_public_token(settings.public_profile_id))


@router.get("/getMyProfile", response_model=ProfileEnvelope)
async def get_my_profile(
    user: CurrentUser = Depends(allow_public),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the caller's profile; null when it has never been saved"""
    return ProfileEnvelope(profile=service.get_profile(user.id))


@router.put("/saveUpdateMyProfile", response_model=ProfileEnvelope)
async def save_update_my_profile(
    user: CurrentUser = Depends(require_user),
    update: ProfileUpdate = Depends(profile_form),
    avatar: Optional[UploadFile] = File(None),
    resume: Optional[UploadFile] = File(None),
    service: ProfileService = Depends(get_profile_service)
):
    """Create or update the caller's profile (multipart/form-data)"""
    # Browsers send empty file parts for untouched file inputs
    avatar = avatar if avatar is not None and avatar.filename else None
    resume = resume if resume is not None and resume.filename else None
    saved = await service.update_profile(user.id, update, avatar=avatar, resume=resume)
    return ProfileEnvelope(profile=saved)


@router.get("/me/resume", response_model=ResumeDownloadResponse)
async def download_resume(
    user: CurrentUser = Depends(verify_token),
    service: ProfileService = Depends(get_profile_service)
):
    """Signed, short-lived download URL for the caller's resume"""
    return service.create_resume_download(user.id)
