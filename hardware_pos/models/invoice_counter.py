from beanie import Document
from pydantic import Field


class InvoiceCounter(Document):
    """Last invoice sequence handed out for one calendar day."""
    id: str                 # YYYYMMDD
    seq: int = Field(default=0, ge=0)

    class Settings:
        name = "invoice_counters"
