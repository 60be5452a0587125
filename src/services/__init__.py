from .api_client import ApiClient
from .brands import BrandsService, brands_query_key
from .brands_view import BrandStats, BrandsViewController
from .creation_wizard import CreationWizard, WizardStep
from .debounce import DebouncedInput
from .edit_session import BrandDraft, EditSession, Editing, Idle
from .mutations import MutationCoordinator, MutationResult
from .notifications import Notification, NotificationKind, NotificationQueue
from .query_cache import ActiveQuery, CacheEntry, QueryCache, QueryKey, QueryStatus

__all__ = [
    "ActiveQuery",
    "ApiClient",
    "BrandDraft",
    "BrandStats",
    "BrandsService",
    "BrandsViewController",
    "CacheEntry",
    "CreationWizard",
    "DebouncedInput",
    "EditSession",
    "Editing",
    "Idle",
    "MutationCoordinator",
    "MutationResult",
    "Notification",
    "NotificationKind",
    "NotificationQueue",
    "QueryCache",
    "QueryKey",
    "QueryStatus",
    "WizardStep",
    "brands_query_key",
]
