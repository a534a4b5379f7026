"""
Ports - Interfaces the session layer depends on.

Hexagonal architecture: These define WHAT we need, not HOW.
Adapters provide the HOW.
"""

from clinical_client.ports.credential_store_port import CredentialStorePort

__all__ = [
    "CredentialStorePort",
]
