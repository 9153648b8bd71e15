"""
Avatar studio errors.
"""

from __future__ import annotations


class MissingInputError(Exception):
    """A required image or prompt argument was empty."""

    def __init__(self, field: str):
        super().__init__(f"Missing required input: {field}")
        self.field = field


class MalformedLocalImageError(Exception):
    """A local image string is not a well-formed ``data:image/...;base64,`` URL."""


class RemoteFetchError(Exception):
    """Fetching a remote image failed."""


class GenerationError(Exception):
    """The generative API call failed or returned an unusable body."""


class UploadRejected(Exception):
    """An uploaded file failed type, size or dimension validation.

    ``reason`` is one of ``"type"``, ``"size"``, ``"dimensions"``, ``"invalid"``;
    ``params`` carries the limits used to format the user-facing message.
    """

    def __init__(self, reason: str, **params: object):
        super().__init__(f"Upload rejected ({reason}): {params}")
        self.reason = reason
        self.params = params


class CropRegionTooLarge(Exception):
    """A crop region is wider or taller than its source image."""

    def __init__(self, width: int, height: int, max_width: int, max_height: int):
        super().__init__(
            f"Crop region {width}x{height} exceeds source {max_width}x{max_height}"
        )
        self.max_width = max_width
        self.max_height = max_height
