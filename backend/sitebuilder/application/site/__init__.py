from .content_store import SiteContent, TenantContentStore
from .edit_session import DebounceTimer, EditSession, PendingEdit, SaveQueue
from .provision_sections import provision_sections
