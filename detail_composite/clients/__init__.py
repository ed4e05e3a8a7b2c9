"""
Collaborator interfaces and the Dataverse Web API client.
"""

from detail_composite.clients.dataverse_client import DataverseClient, DataverseSaveTrigger
from detail_composite.clients.interfaces import (
    EnvironmentVariableStore,
    FieldMetadataProvider,
    RecordStore,
    SaveTrigger,
)

__all__ = [
    "DataverseClient",
    "DataverseSaveTrigger",
    "EnvironmentVariableStore",
    "FieldMetadataProvider",
    "RecordStore",
    "SaveTrigger",
]
