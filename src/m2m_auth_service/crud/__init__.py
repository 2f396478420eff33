from .client_registry import ClientRecord, ClientRegistry, CreatedClient

__all__ = ["ClientRecord", "ClientRegistry", "CreatedClient"]
