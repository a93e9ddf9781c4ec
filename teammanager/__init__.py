"""Team roster manager backed by Supabase."""
