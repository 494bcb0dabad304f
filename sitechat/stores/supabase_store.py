"""Lead store backed by a Supabase table."""

import asyncio

from supabase import Client, create_client

from sitechat.config.settings import Settings
from sitechat.errors import StoreError
from sitechat.models import Lead
from sitechat.stores.base import LeadStore


class SupabaseLeadStore(LeadStore):
    """Inserts each lead as one row of ``table``."""

    def __init__(self, client: Client, table: str = "user_leads"):
        self.client = client
        self.table = table

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseLeadStore":
        if not settings.supabase_url or not settings.supabase_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set in the environment")

        client = create_client(settings.supabase_url, settings.supabase_key)
        return cls(client, table=settings.leads_table)

    async def insert_lead(self, lead: Lead) -> None:
        try:
            await asyncio.to_thread(
                lambda: self.client.table(self.table).insert([lead.to_row()]).execute()
            )
        except Exception as e:
            raise StoreError(f"Failed to save lead: {e}") from e
