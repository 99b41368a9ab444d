"""
TM Engine Custom Exceptions
"""


class TMEngineError(Exception):
    """Base exception for the translation memory engine"""
    pass


class MalformedPathError(TMEngineError):
    """Vendor variant path could not be decoded"""
    def __init__(self, variant: str, reason: str):
        self.variant = variant
        self.reason = reason
        super().__init__(f"Malformed variant path {variant!r}: {reason}")


class CorpusLoadError(TMEngineError):
    """Translation memory export is not a parseable TMX document"""
    def __init__(self, message: str, cause: Exception = None):
        self.cause = cause
        super().__init__(message)
