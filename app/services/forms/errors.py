from __future__ import annotations


class FormConfigError(ValueError):
    """A field configuration that cannot be rendered or persisted as-is."""


class DuplicateFieldKeyError(FormConfigError):
    def __init__(self, keys):
        self.keys = sorted(set(keys))
        super().__init__("Duplicate field keys: " + ", ".join(self.keys))


class InvalidFieldKeyError(FormConfigError):
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f'Invalid field key "{key}": {reason}')
