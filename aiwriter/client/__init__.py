from aiwriter.client.api import DocumentApiClient

__all__ = ["DocumentApiClient"]
