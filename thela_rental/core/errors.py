class ThelaRentalError(Exception):
    """Base class for all errors raised by the rental core."""


class ValidationError(ThelaRentalError):
    """A record or form value failed validation."""

    def __init__(self, message: str, missing_fields: tuple = ()):
        super().__init__(message)
        self.missing_fields = tuple(missing_fields)


class PersistenceError(ThelaRentalError):
    """Reading or writing the stored records failed."""


class SchedulingError(ThelaRentalError):
    """The platform notification service refused a reminder."""
