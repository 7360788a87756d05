"""CSP keyword and directive-name constants."""

from __future__ import annotations

# Source-list keywords
NONE = "'none'"
WILDCARD = "*"
SELF = "'self'"
UNSAFE_HASHES = "'unsafe-hashes'"
UNSAFE_INLINE = "'unsafe-inline'"
UNSAFE_EVAL = "'unsafe-eval'"

# Directives whose name ends with this suffix hold a source list
SRC_SUFFIX = "-src"

SCHEME_DELIMITER = "://"

# Well-known directive names
CONNECT_SRC = "connect-src"
DEFAULT_SRC = "default-src"
FONT_SRC = "font-src"
IMG_SRC = "img-src"
MANIFEST_SRC = "manifest-src"
MEDIA_SRC = "media-src"
SCRIPT_SRC = "script-src"
STYLE_SRC = "style-src"
FRAME_ANCESTORS = "frame-ancestors"
NAVIGATE_TO = "navigate-to"
REPORT_TO = "report-to"
REPORT_URI = "report-uri"
UPGRADE_INSECURE_REQUESTS = "upgrade-insecure-requests"
