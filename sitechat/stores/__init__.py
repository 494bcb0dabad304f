"""Vector and row stores."""

from sitechat.stores.base import ChunkStore, LeadStore
from sitechat.stores.pinecone_store import PineconeChunkStore
from sitechat.stores.supabase_store import SupabaseLeadStore

__all__ = ["ChunkStore", "LeadStore", "PineconeChunkStore", "SupabaseLeadStore"]
