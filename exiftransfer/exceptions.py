# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for ExifTransfer

This module defines the exceptions raised at the boundaries of the
library: decoding an image, encoding a tag structure back into an image,
importing a JSON export and decoding a vendor recipe.

The conversion and formatting functions themselves never raise for bad
data; they degrade to fewer or blanker fields instead.

Copyright 2025 DNAi inc.
"""


class ExifTransferError(Exception):
    """
    Base exception for all ExifTransfer errors.

    All ExifTransfer exceptions inherit from this class, allowing
    catch-all error handling at the command line or in a caller's
    event handler.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class MetadataReadError(ExifTransferError):
    """
    Raised when EXIF metadata cannot be read from image bytes.

    This exception is raised when:
    - The data is not a JPEG (or bare EXIF segment) at all
    - The image carries no EXIF APP1 segment
    - The IFD structure inside the segment cannot be parsed
    """
    pass


class MetadataWriteError(ExifTransferError):
    """
    Raised when a tag structure cannot be encoded or inserted.

    This exception is raised when:
    - The encoder rejects the raw tag structure
    - The target image is not a JPEG the encoder can rewrite
    """
    pass


class RecipeDecodeError(ExifTransferError):
    """
    Raised when a vendor recipe cannot be decoded from a MakerNote.

    Loading code recovers from this locally: the recipe is treated as
    absent and the rest of the metadata tree is unaffected.
    """
    pass


class JSONImportError(MetadataReadError):
    """
    Raised when a JSON export cannot be turned back into a metadata tree.

    This exception is raised when:
    - The file is not UTF-8 text
    - The text is not valid JSON
    - The top level or a section is not a JSON object
    - A byte-array wrapper is malformed
    - A leaf has a shape no metadata value can take (null, boolean)
    """
    pass


class InvalidTagError(ExifTransferError):
    """
    Raised when an edit targets a tag or section that cannot take it.

    This exception is raised when:
    - The section to edit is not present in the tree
    - A field is added that is not in the addable tag table
    - The supplied value cannot be converted to the tag's input kind
    """
    pass
