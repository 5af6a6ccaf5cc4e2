# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references users.id) - one profile per user
- full_name: text (nullable)
- description: text (nullable)
- email: text (nullable) - contact email shown on the portfolio
- primary_phone: text (nullable)
- secondary_phone: text (nullable)
- location: text (nullable)
- website: text (nullable)
- linkedin: text (nullable)
- github: text (nullable)
- logo_initials: text (nullable)
- open_to_work: boolean (default: false)
- currenttheme: text (nullable)
- themes: jsonb (nullable)
- skills: jsonb (nullable)
- experiences: jsonb (nullable)
- avatar_url: text (nullable) - public URL of the avatar image
- resume_url: text (nullable) - storage object path of the resume PDF;
  downloads go through short-lived signed URLs
- updated_at: timestamp (not null, refreshed on every write)

Rows are created lazily by the first profile save (upsert on id).

Storage bucket (ASSET_BUCKET, default "assets"):
- avatars/{user_id}/{uuid}.{ext}
- resumes/{user_id}/{uuid}.pdf
"""
