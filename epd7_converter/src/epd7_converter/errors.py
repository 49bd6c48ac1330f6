"""Exceptions raised while converting images for the e-paper display."""


class ConversionError(Exception):
    """Base exception for conversion errors."""


class ValidationError(ConversionError):
    """A source file or destination entry could not be used."""


class DecodeError(ConversionError):
    """The source file could not be read as an image."""


class DimensionError(ConversionError):
    """The source image does not match the display resolution."""


class OutputError(ConversionError):
    """Writing a binary or preview file failed."""


class DestinationError(ConversionError):
    """The destination directory could not be listed."""
