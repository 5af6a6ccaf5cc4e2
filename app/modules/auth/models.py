# Supabase table: used_reset_tokens
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Credentials live in the users table (see app/modules/users/models.py)

"""
Expected Supabase table structure:

used_reset_tokens:
- jti: text (primary key) - jti claim of a consumed password reset token
- user_id: uuid (foreign key to users.id, not null)
- expires_at: timestamp (not null) - exp claim of the token; rows past this
  can be purged, the token itself is no longer accepted by then
- used_at: timestamp (default: now())

A reset token is honoured only if inserting its jti here succeeds, so each
token changes the password at most once.
"""
