"""
Supabase-backed data access.

Responsibilities:
- Own the lazily created Supabase client.
- Query approved listings, the enhanced-search RPC and the remote search functions.
- Aggregate business reviews and read catalog tables.

Every failure here is logged and degrades to an empty value.
"""
