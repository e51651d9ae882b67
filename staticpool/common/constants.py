"""Constants for StaticPool."""

# Default server root, relative to the working directory
DEFAULT_ROOT = "./public"

# Default bind address (loopback only)
DEFAULT_SERVER_HOST = "127.0.0.1"

# Default server port
DEFAULT_SERVER_PORT = 8080

# Worker threads for blocking file I/O and compression
DEFAULT_POOL_SIZE = 4

# Files at or below this size are never gzip-encoded
MIN_GZIP_SIZE = 1024

# Fastest gzip level
DEFAULT_GZIP_LEVEL = 1

# Appended to a resolved path that names a directory
INDEX_FILE = "index.html"

# Appended to a resolved path whose final component has no extension
DEFAULT_EXTENSION = "html"

# Environment variable prefix for settings
ENV_PREFIX = "STATICPOOL_"


class Headers:
    CONTENT_TYPE = "Content-Type"
    CONTENT_LENGTH = "Content-Length"
    CONTENT_ENCODING = "Content-Encoding"
    ACCEPT_ENCODING = "Accept-Encoding"


# Content Encodings
ENCODING_GZIP = "gzip"
