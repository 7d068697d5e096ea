"""Exception taxonomy shared by the converter, detector, and texture I/O."""


class ConversionError(Exception):
    """Base class for all texture conversion failures."""


class TextureNotFoundError(ConversionError, FileNotFoundError):
    """Raised when a source texture or a required sibling texture is missing."""


class InvalidBufferError(ConversionError, ValueError):
    """Raised when pixel data does not match its declared layout."""


class InvalidDimensionsError(InvalidBufferError):
    """Raised for zero-sized images or textures whose sizes do not agree."""


class MissingChannelError(ConversionError, ValueError):
    """Raised when an operation needs an alpha channel the texture lacks."""


class UnsupportedFormatError(ConversionError, ValueError):
    """Raised when asked to encode a container format we cannot write."""


class EncodeError(ConversionError, IOError):
    """Raised when the image encoder fails to produce an output file."""


class AmbiguousFormatError(ConversionError):
    """Raised when detection cannot pick a direction and none was forced."""


class OutputConflictError(ConversionError, ValueError):
    """Raised when an output path would overwrite one of the source textures."""
