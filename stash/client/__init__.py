from stash.client.pagination import RevealController
from stash.client.pipeline import apply_notes_only, filter_records, group_by_domain
from stash.client.records import BookmarkRecord
from stash.client.sync import DisplayState, SyncController
from stash.client.transport import StashClient

__all__ = [
    "BookmarkRecord",
    "DisplayState",
    "RevealController",
    "StashClient",
    "SyncController",
    "apply_notes_only",
    "filter_records",
    "group_by_domain",
]
