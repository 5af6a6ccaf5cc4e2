from supabase import Client
from app.core.errors import UpstreamError
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, name, email"


class UserService:
    """Credential store over the ``users`` table.

    Lookups return ``None`` for a missing row; store failures raise
    ``UpstreamError`` so callers can tell the two apart.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_email(self, email: str, with_password: bool = False) -> Optional[Dict[str, Any]]:
        columns = f"{USER_COLUMNS}, password_hash" if with_password else USER_COLUMNS
        try:
            result = self.supabase.table("users")\
                .select(columns)\
                .eq("email", email)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Supabase error (get user by email): {e}")
            raise UpstreamError("Error checking user.")
        return result.data[0] if result.data else None

    def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("users")\
                .select(USER_COLUMNS)\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Supabase error (get user by id): {e}")
            raise UpstreamError("Error checking user.")
        return result.data[0] if result.data else None

    def create_user(self, name: str, email: str, password_hash: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("users").insert({
                "name": name,
                "email": email,
                "password_hash": password_hash,
            }).execute()
        except Exception as e:
            logger.error(f"Supabase error (insert user): {e}")
            raise UpstreamError("Error creating user.")
        if not result.data:
            logger.error("Supabase insert user returned no row")
            raise UpstreamError("Error creating user.")
        row = result.data[0]
        return {"id": row["id"], "name": row.get("name"), "email": row.get("email")}

    def update_password(self, user_id: str, password_hash: str) -> None:
        try:
            self.supabase.table("users")\
                .update({"password_hash": password_hash})\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Supabase error (reset password): {e}")
            raise UpstreamError("Error updating password.")
