"""FileDepot - File upload and management service.

Accepts single and batched multipart uploads, validates them against a
type and size policy, stores them on disk by category and records their
metadata for listing, renaming and deletion.
"""

__version__ = "0.1.0"

from filedepot.infrastructure.api.app import app

__all__ = ["app", "__version__"]
