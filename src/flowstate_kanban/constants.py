STATE_DIR_NAME = ".flowstate"
CONFIG_FILE = "config.yaml"
ACTIVITY_FILE = "activity.jsonl"
STORAGE_KEY = "agentic-kanban-state-v1"
WINDOWS_LOCK_BYTES = 4096

DEFAULT_STORAGE_BACKEND = "file"
DEFAULT_LOG_LEVEL = "INFO"

COPY_SUFFIX = " (Copy)"
FILTER_ALL = "all"
