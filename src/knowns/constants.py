"""
Global constants for the Knowns CLI.
"""

# Project layout
KNOWNS_DIR = ".knowns"
CONFIG_FILE = "config.json"
IMPORTS_DIR = "imports"
METADATA_FILE = ".import.json"
LINKED_METADATA_SUFFIX = ".import.json"
SERVER_PORT_FILE = ".server-port"
TEMPLATES_DIR = "templates"
DOCS_DIR = "docs"

# Project root discovery depth limit
MAX_PROJECT_ROOT_DEPTH = 20

# Import naming
MAX_IMPORT_NAME_LENGTH = 50
DEFAULT_IMPORT_NAME = "imported"

# Paths never copied out of a fetched source tree
ALWAYS_IGNORED_PATTERNS = ("**/.git/**", "**/node_modules/**", METADATA_FILE)

# Skip reasons reported in FileChange.skip_reason
SKIP_LOCAL_MODIFICATIONS = "Local modifications detected"
SKIP_UNCHANGED = "unchanged"

# npm registry
DEFAULT_NPM_REGISTRY = "https://registry.npmjs.org"
DEFAULT_NPM_TAG = "latest"
NPM_REQUEST_TIMEOUT = 60

# Live UI notification
DEFAULT_SERVER_PORT = 6420
NOTIFY_TIMEOUT = 1.0

# Temp directory prefix for staged sources
STAGING_PREFIX = "knowns-import-"

# Logging constants
LOG_APP_NAME = "Knowns"
LOG_FILE_NAME = "knowns"
LOG_RETENTION_DAYS = 7
LOG_LINES_TO_SHOW = 20

# Sensitive data keys for sanitization
SENSITIVE_KEYS = (
    "password", "token", "access_token", "secret", "authorization",
    "api_key", "bearer", "cookie", "npm_token", "git_token"
)
