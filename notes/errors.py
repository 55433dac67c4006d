# notes/errors.py


class MappingError(ValueError):
    """Channel mapping is missing, malformed, or names an unknown preset."""


class NoteValidationError(ValueError):
    pass
