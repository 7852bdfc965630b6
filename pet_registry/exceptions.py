"""Custom exception hierarchy for pet-registry."""


class PetRegistryError(Exception):
    """Base exception for all pet-registry errors."""


class ValidationError(PetRegistryError):
    """Raised when caller input is missing or malformed.

    Parameters
    ----------
    message : str
        Summary message.
    errors : list[str] | None
        Individual problems found; defaults to ``[message]``.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class GeocodeError(PetRegistryError):
    """Raised when an address cannot be resolved to a location."""


class NoMatchError(GeocodeError):
    """Raised when the geocoding provider returns no candidates."""


class ProviderUnavailableError(GeocodeError):
    """Raised when the geocoding provider fails or times out."""


class RecordNotFoundError(PetRegistryError):
    """Raised when a pet record id is unknown."""


class UnauthorizedError(PetRegistryError):
    """Raised when the caller does not own the record being mutated."""


class InvalidTransitionError(PetRegistryError):
    """Raised when a status change is not permitted from the current state."""


class ConfigurationError(PetRegistryError):
    """Raised when configuration is invalid or missing."""


class StoreError(PetRegistryError):
    """Raised when the record store fails to commit or persist."""
