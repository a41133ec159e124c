"""Club-Entitlements exception hierarchy."""


class EntitlementsError(Exception):
    """Base exception for all entitlement errors."""

    def __init__(self, message: str = "", code: str = "ENTITLEMENTS_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidFlagKeyError(EntitlementsError):
    """Raised when an operational flag write names a key that is not operational."""

    def __init__(self, message: str = "Invalid operational flag key"):
        super().__init__(message, code="INVALID_FLAG_KEY")


class ClubNotFoundError(EntitlementsError):
    """Raised when a write path targets a club that does not exist."""

    def __init__(self, message: str = "Club not found"):
        super().__init__(message, code="NOT_FOUND")


class FeatureNotFoundError(EntitlementsError):
    """Raised when a feature key has no catalog definition."""

    def __init__(self, message: str = "Feature definition not found"):
        super().__init__(message, code="NOT_FOUND")


class PackageNotFoundError(EntitlementsError):
    """Raised when a package cannot be found in the catalog."""

    def __init__(self, message: str = "Package not found"):
        super().__init__(message, code="NOT_FOUND")


class AssignmentConflictError(EntitlementsError):
    """Raised when a club assignment would overlap an existing one."""

    def __init__(self, message: str = "Conflicting club assignment"):
        super().__init__(message, code="CONFLICT")
