class DomainValidationError(ValueError):
    """
    Error de validación de negocio. La API lo traduce a 400.
    """

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_error(self) -> dict:
        error = {"msg": self.message, "type": "value_error"}
        if self.field:
            error["loc"] = ["body", self.field]
        return error


class DomainPermissionError(PermissionError):
    """
    El usuario está autenticado pero no tiene permiso para la operación. La API lo traduce a 403.
    """
