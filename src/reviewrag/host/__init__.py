"""Source-control host clients."""

from reviewrag.host.azure_devops import AzureDevOpsClient
from reviewrag.host.base import HostClient

__all__ = ["AzureDevOpsClient", "HostClient"]
