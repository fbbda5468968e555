class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the admin password is wrong."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class InvalidTransitionError(DomainError):
    """Raised when a check-in operation is not allowed in the current step."""


class SessionBusyError(InvalidTransitionError):
    """Raised when a check-in call arrives while another one is processing."""


class DeviceError(DomainError):
    """Base class for camera/microphone/geolocation failures."""


class PermissionDeniedError(DeviceError):
    pass


class CaptureError(DeviceError):
    """No usable frame was captured."""


class GeolocationError(DeviceError):
    pass


class VerifierError(DomainError):
    """The external verifier could not produce a result."""


class VerifierUnavailableError(VerifierError):
    """Transport failure: timeout, connection error, non-2xx response."""


class VerifierResponseError(VerifierError):
    """The verifier answered, but not in the agreed shape."""


class NotificationError(DomainError):
    pass


class PersistenceError(DomainError):
    pass
