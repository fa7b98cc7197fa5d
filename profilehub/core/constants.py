# profilehub/core/constants.py
# Shared constants: storage keys, backup envelope version, capacity & section defaults

from enum import Enum

# device storage keys (one JSON record each)
PROFILES_KEY = "resume_profiles_v2"
BACKUP_KEY = "resume_profiles_backup"

# backup envelope version tag; envelopes w/ any other version are rejected
BACKUP_VERSION = "v2"

# device storage capacity estimate (bytes)
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


# * Storage backend identifiers
class StorageBackend(str, Enum):
    DEVICE = "device"
    DATABASE = "database"


# * Resume templates
class Template(str, Enum):
    CLASSIC = "classic"
    COMPACT = "compact"


# render order used when a profile has no section_order of its own
DEFAULT_SECTION_ORDER: tuple[str, ...] = ("skills", "experiences", "projects", "education")

# suffix appended to a cloned profile's name
CLONE_SUFFIX = " Copy"

NEW_PROFILE_NAME = "New Profile"
