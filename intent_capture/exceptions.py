# intent_capture/exceptions.py
"""Exception types shared across the pipeline."""

class IntentCaptureError(Exception):
    """Base class for pipeline errors."""

class LLMResponseError(IntentCaptureError):
    """The language model returned empty or unparsable output."""

class StoreError(IntentCaptureError):
    """A store read or write failed."""

def public_message(error: Exception, production: bool) -> str:
    """Error text safe to return to callers."""
    if production:
        return "Internal server error"
    return str(error) or type(error).__name__
