"""Repository-specific exceptions.

These exceptions provide semantic meaning for data access errors,
separating them from general database errors.
"""


class RepositoryError(Exception):
    """Base exception for repository operations."""


class DuplicateError(RepositoryError):
    """Entity already exists (unique constraint violation).

    The offending value is kept on the instance but left out of the message,
    since messages end up in logs and API responses.
    """

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with this {field} already exists")
