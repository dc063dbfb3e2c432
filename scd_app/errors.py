from __future__ import annotations


class WatchdogError(Exception):
    """Base class for validation failures surfaced to the caller; none are retryable."""


class ConfigError(WatchdogError, ValueError):
    pass


class SelectorCardinalityError(WatchdogError, LookupError):
    def __init__(self, selector: object, found: int, expected: str = "exactly one"):
        super().__init__(f"Expected {expected} element for selector {selector!r}, but found {found}.")
        self.selector = selector
        self.found = found


class UninitializedSessionError(WatchdogError, RuntimeError):
    def __init__(self):
        super().__init__("Session is not monitoring. Call Session.initialize() first.")


class InvalidFieldTypeError(WatchdogError, TypeError):
    def __init__(self, reason: str):
        super().__init__(f"Element is not a text field (text input, textarea or contenteditable): {reason}")
        self.reason = reason


class HandleNotInitializedError(WatchdogError, RuntimeError):
    def __init__(self, field_id: str):
        super().__init__(f"Field handle {field_id!r} is not initialized. Call initialize() first.")
        self.field_id = field_id
