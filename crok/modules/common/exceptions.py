"""Domain exception classes for business logic errors."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class ResourceExistsError(DomainError):
    """Raised when attempting to create a resource that already exists."""

    pass


class ValidationError(DomainError):
    """Raised when data validation fails, including out-of-range block indexes."""

    pass


class PermissionDeniedError(DomainError):
    """Raised when a user attempts an action they don't have permission for."""

    pass


class AuthenticationError(DomainError):
    """Raised when an operation requires a signed-in user and there is none."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when a username/password pair does not match a registered user."""

    pass


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user cannot be found."""

    pass


class UsernameTakenError(ResourceExistsError):
    """Raised when registering a username that is already in use."""

    pass


class DocumentNotFoundError(ResourceNotFoundError):
    """Raised when a document cannot be found."""

    pass


class EditorStateError(DomainError):
    """Raised when an editor action is not valid in the editor's current mode."""

    pass
