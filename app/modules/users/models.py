# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- email: text (unique, not null)
- password_hash: text (not null) - bcrypt hash, never returned by the API
- created_at: timestamp (default: now())

Rows are created by registration and only ever updated by password reset.
The unique index on email is what settles two concurrent registrations.
"""
