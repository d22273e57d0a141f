# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Configuration for tag conversion and value formatting.

Copyright 2025 DNAi inc.
"""

from typing import Any, Callable, Dict, Optional, Tuple


# Signature of a vendor recipe decoder: MakerNote bytes in, flat mapping out.
RecipeDecoder = Callable[[bytes], Dict[str, Any]]


class ConverterConfig:
    """
    Configuration shared by the formatter, parser, converter and loader.

    The defaults reproduce the behaviour of the original browser tool.
    Instances are plain attribute bags; create one, adjust the attributes
    and pass it as ``config=`` to any public function.
    """

    def __init__(self, recipe_decoder: Optional[RecipeDecoder] = None):
        """
        Initialize with default conversion rules.

        Args:
            recipe_decoder: Optional callable decoding MakerNote bytes into a
                            vendor recipe mapping
        """
        # Fixed denominator for rationals; bounds precision to 5 decimal digits.
        self.rational_denominator: int = 100_000

        # IFDs tried, in order, when a tag is not known in its section's IFD.
        # Capture parameters belong to the Exif IFD (EXIF 2.3, 4.6.5), so it
        # is tried before 0th, whose piexif table repeats many TIFF/EP names.
        self.fallback_ifd_order: Tuple[str, ...] = ('Exif', '0th', 'GPS', 'Interop', '1st')

        # strftime/strptime format for rendering timestamps (locale aware).
        self.date_display_format: str = '%c'

        # The transfer command drops GPS tags unless told otherwise.
        self.remove_gps_on_transfer: bool = True

        self.recipe_decoder: Optional[RecipeDecoder] = recipe_decoder


DEFAULT_CONFIG = ConverterConfig()
