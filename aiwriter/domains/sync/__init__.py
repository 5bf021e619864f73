from aiwriter.domains.sync.controller import DocumentGateway, SyncController, SyncState
from aiwriter.domains.sync.autosave import AutosaveScheduler, SaveStatus

__all__ = [
    "DocumentGateway", "SyncController", "SyncState",
    "AutosaveScheduler", "SaveStatus"
]
