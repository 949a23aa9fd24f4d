"""
Errors raised by the conversion pipeline.

Every error carries a ``kind`` string so callers (and logs) can tell failure
classes apart without matching on class names.
"""

from typing import Optional


class PagePressError(Exception):
    kind = "error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    default_message = "Conversion failed."


class InvalidMarkupError(PagePressError):
    kind = "invalidMarkup"
    default_message = "The page HTML could not be parsed."


class InsufficientContentError(PagePressError):
    kind = "insufficientContent"
    default_message = (
        "The extracted article content is too short. The page may not contain readable content."
    )


class PackagingError(PagePressError):
    kind = "packagingFailed"
    default_message = "Failed to build the EPUB archive."


class EmptyChapterSetError(PackagingError):
    kind = "emptyChapterSet"
    default_message = "Cannot build an EPUB without chapters."


class ArchiveCreationError(PackagingError):
    kind = "archiveCreationFailed"
    default_message = "Failed to create EPUB archive."


class ArchiveSerializationError(PackagingError):
    kind = "archiveSerializationFailed"
    default_message = "Failed to extract EPUB data from archive."


class RemoteFetchError(PagePressError):
    kind = "remoteFetchFailed"
    default_message = "The post could not be loaded from the read API."


class RenderTimeoutError(PagePressError):
    kind = "renderTimeout"
    default_message = "Rendering the page took too long."


class RenderNavigationError(PagePressError):
    kind = "renderNavigationFailed"
    default_message = "The page could not be loaded for rendering."


class FetchError(PagePressError):
    kind = "fetchFailed"
    default_message = "Could not load the page."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        if message is None and status_code is not None:
            message = f"Server returned error {status_code}."
        super().__init__(message)
        self.status_code = status_code


class InvalidURLError(PagePressError):
    kind = "invalidURL"
    default_message = "Please enter a valid URL."


class NotAWebPageError(PagePressError):
    kind = "notAWebPage"
    default_message = "The URL points to a media file, not a web page."
