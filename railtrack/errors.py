"""Error taxonomy for certificate generation.

Every failure raised by the core derives from :class:`RailTrackError` so the
request handlers can turn it into a single ``{"success": false, "error": ...}``
response without knowing which stage failed.
"""


class RailTrackError(Exception):
    """Base class for all certificate pipeline failures."""

    status_code = 500


class ValidationError(RailTrackError):
    """The request body is missing required fields or holds malformed values."""

    status_code = 400


class EncodingError(RailTrackError):
    """A QR code could not be produced, usually because the payload is too long."""


class RenderError(RailTrackError):
    """Laying out the PDF failed or did not finish before the deadline."""


class StorageError(RailTrackError):
    """Reading or writing an artifact in the upload folder failed."""


class ArtifactNotFound(StorageError):
    status_code = 404
