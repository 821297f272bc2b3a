"""Adapter layer exports."""

from .supabase_client import QuotationStore, SupabaseQuotationStore, get_supabase_client

__all__ = ["QuotationStore", "SupabaseQuotationStore", "get_supabase_client"]
