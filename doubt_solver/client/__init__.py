"""
Client-side access to the backend: explanation requests and the record store.
Both share the process-wide ClientSettings (base URL + anon key).
"""
from .explanation_client import ExplanationClient, RequestFailed
from .record_store import RecordStoreGateway, StoreError

__all__ = [
    "ExplanationClient",
    "RequestFailed",
    "RecordStoreGateway",
    "StoreError",
]
