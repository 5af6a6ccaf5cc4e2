import json
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, UploadFile
from supabase import Client

from app.core.errors import AuthorizationError, BadRequestError, NotFoundError, UpstreamError
from app.modules.profiles.schemas import ProfileUpdate, ResumeDownloadResponse
import logging

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "full_name", "description", "email", "primary_phone", "secondary_phone",
    "location", "website", "linkedin", "github", "logo_initials", "currenttheme",
)
JSON_FIELDS = ("themes", "skills", "experiences")
PDF_CONTENT_TYPE = "application/pdf"


def parse_json_field(value: Any) -> Any:
    """Structured values pass through; strings are JSON-decoded, else split on commas.

    Returns ``None`` for empty input so the field is left untouched.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (list, dict)):
        return value
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return [v.strip() for v in value.split(",") if v.strip()]
    return None


def parse_bool(value: Any) -> bool:
    return value is True or value == "true"


def is_pdf(upload: UploadFile) -> bool:
    return upload.content_type == PDF_CONTENT_TYPE or (upload.filename or "").lower().endswith(".pdf")


def build_profile_payload(update: ProfileUpdate) -> Dict[str, Any]:
    """Columns to write for a sparse profile save; blank text clears a column"""
    payload: Dict[str, Any] = {}
    for field in TEXT_FIELDS:
        value = getattr(update, field)
        if value is not None:
            payload[field] = value or None
    if update.open_to_work is not None:
        payload["open_to_work"] = parse_bool(update.open_to_work)
    for field in JSON_FIELDS:
        parsed = parse_json_field(getattr(update, field))
        if parsed is not None:
            payload[field] = parsed
    return payload


class ProfileService:
    def __init__(self, supabase: Client, storage, resume_url_expiry: int = 600):
        self.supabase = supabase
        self.storage = storage
        self.resume_url_expiry = resume_url_expiry

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Supabase error fetching profile: {e}")
            raise UpstreamError("Error fetching profile")
        return result.data[0] if result.data else None

    async def update_profile(
        self,
        user_id: str,
        update: ProfileUpdate,
        avatar: Optional[UploadFile] = None,
        resume: Optional[UploadFile] = None,
    ) -> Dict[str, Any]:
        """Store attached files, then upsert the profile row with the given fields"""
        if resume is not None and not is_pdf(resume):
            raise BadRequestError("Resume must be a PDF")

        payload = build_profile_payload(update)
        uploaded = []
        try:
            if avatar is not None:
                ext = os.path.splitext(avatar.filename or "")[1].lstrip(".").lower() or "jpg"
                avatar_path = f"avatars/{user_id}/{uuid.uuid4()}.{ext}"
                self.storage.upload_file(await avatar.read(), avatar_path, avatar.content_type or "image/jpeg")
                uploaded.append(avatar_path)
                payload["avatar_url"] = self.storage.public_url(avatar_path)
                logger.info(f"Uploaded avatar for user {user_id}: {avatar_path}")

            if resume is not None:
                resume_path = f"resumes/{user_id}/{uuid.uuid4()}.pdf"
                self.storage.upload_file(await resume.read(), resume_path, PDF_CONTENT_TYPE)
                uploaded.append(resume_path)
                payload["resume_url"] = resume_path
                logger.info(f"Uploaded resume for user {user_id}: {resume_path}")

            return self.upsert_profile_row(user_id, payload)
        except HTTPException:
            self.discard_uploads(uploaded)
            raise
        except Exception as e:
            logger.error(f"updateMyProfile error for user {user_id}: {e}")
            self.discard_uploads(uploaded)
            raise UpstreamError("Error updating profile")

    def discard_uploads(self, paths: List[str]) -> None:
        """Best-effort removal of objects no profile row points at"""
        for path in paths:
            try:
                self.storage.delete_file(path)
                logger.info(f"Deleted orphaned upload: {path}")
            except Exception as e:
                logger.warning(f"Failed to delete orphaned upload ({path}): {e}")

    def upsert_profile_row(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Insert-or-update on the primary key in a single statement"""
        if not user_id:
            raise AuthorizationError("Invalid user context for profile write")
        row = {**payload, "id": user_id, "updated_at": datetime.now(timezone.utc).isoformat()}
        result = self.supabase.table("profiles")\
            .upsert(row, on_conflict="id")\
            .execute()
        if not result.data:
            raise UpstreamError("Error updating profile")
        return result.data[0]

    def create_resume_download(self, user_id: str) -> ResumeDownloadResponse:
        """Short-lived signed URL for the caller's resume"""
        try:
            result = self.supabase.table("profiles")\
                .select("resume_url")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"downloadResume error for user {user_id}: {e}")
            raise UpstreamError("Error creating signed url")

        resume_path = result.data[0].get("resume_url") if result.data else None
        if not resume_path:
            raise NotFoundError("No resume available")

        try:
            url = self.storage.signed_url(resume_path, self.resume_url_expiry)
        except Exception as e:
            logger.error(f"downloadResume error for user {user_id}: {e}")
            raise UpstreamError("Error creating signed url")
        return ResumeDownloadResponse(url=url, expires_in=self.resume_url_expiry)
