# ==============================================================================
# ERRORES DEL DOMINIO
# ==============================================================================
# Los servicios lanzan estas excepciones; main.py las convierte en
# respuestas JSON {"success": False, "error": ...} con su status_code.
# ==============================================================================


class FixosError(Exception):
    """Error base de la aplicación."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.message}


class ValidationError(FixosError):
    """Datos inválidos o incompletos enviados por el usuario."""
    status_code = 400


class NotFoundError(FixosError):
    """Registro inexistente."""
    status_code = 404


class CloudStorageError(FixosError):
    """Fallo del espejo en la nube (conexión, driver, SQL)."""
    status_code = 502


class ExternalServiceError(FixosError):
    """Fallo de una API externa (CEP, IA)."""
    status_code = 502
