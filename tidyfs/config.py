"""
Configuration constants for tidyfs.
"""

APP_NAME = "tidyfs"
CONFIG_FILE_NAME = "config.json"
CONFIG_ENV_VAR = "TIDYFS_CONFIG"

# --- File Type Definitions ---
DOCUMENT_EXTS = {'pdf', 'doc', 'docx', 'txt', 'rtf', 'odt', 'md', 'xls', 'xlsx', 'ppt', 'pptx'}
IMAGE_EXTS = {'jpg', 'jpeg', 'png', 'gif', 'bmp', 'tiff', 'svg', 'webp'}
VIDEO_EXTS = {'mp4', 'avi', 'mov', 'wmv', 'flv', 'mkv', 'webm'}
AUDIO_EXTS = {'mp3', 'wav', 'ogg', 'flac', 'aac', 'm4a'}
ARCHIVE_EXTS = {'zip', 'rar', '7z', 'tar', 'gz', 'bz2', 'xz'}
CODE_EXTS = {'rs', 'py', 'js', 'html', 'css', 'java', 'c', 'cpp', 'h', 'go', 'rb', 'php', 'sh'}
EXECUTABLE_EXTS = {'exe', 'msi', 'app', 'dmg', 'deb', 'rpm'}

# Label used for files without an extension
UNKNOWN_LABEL = "unknown"

# --- Hashing & Performance ---
HASH_CHUNK_SIZE = 8 * 1024  # 8 KB chunks for reading
MAX_SCAN_WORKERS = 8

# --- Organization ---
SCHEMES = ("type", "date", "ext")
DEFAULT_SCHEME = "type"
DATE_FOLDER_FORMAT = "%Y-%m"
NO_EXTENSION_FOLDER = "no_extension"
UNSORTED_FOLDER = "Unsorted"
UNKNOWN_FOLDER = "Other"
MISC_FOLDER = "Miscellaneous"

# --- Settings ---
DEFAULT_IGNORE_PATTERNS = [".git", "node_modules"]
MAX_RECENT_DIRECTORIES = 10

# --- Reporting ---
TOP_FILES = 5
TOP_DUPLICATE_GROUPS = 5
