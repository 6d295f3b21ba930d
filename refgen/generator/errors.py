"""Errors raised while generating code for a package."""


class GenerationError(RuntimeError):
    """Raised when a package cannot be generated."""


class TypeSyntaxError(GenerationError):
    """Raised for a type expression or declaration the generator cannot parse."""


class ExportError(GenerationError):
    """Raised when a reference field points at an unexported type."""


class AmbiguousTagError(GenerationError):
    """Raised when one naming tag is shared by several field names."""


class TypeLookupError(GenerationError, LookupError):
    """Raised when a type used by a declaration has no recorded declaration."""


class PolicyError(GenerationError):
    """Raised for a reference tag the generator does not understand."""
