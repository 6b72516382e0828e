# ==============================================================================
# CONFIGURACIÓN - Variables de entorno y archivo .env
# ==============================================================================
# Todas las opciones tienen valor por defecto: la aplicación arranca en modo
# local sin ninguna variable definida. No existe URL de nube por defecto.
# ==============================================================================

import os
from typing import Optional

from pydantic_settings import BaseSettings

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

DB_MODE_LOCAL = 'local'
DB_MODE_CLOUD = 'cloud'


class Settings(BaseSettings):
    # Almacenamiento local (siempre activo)
    FIXOS_DATA_DIR: str = os.path.join(BASE_DIR, 'data')
    # Espejo en la nube: 'local' o 'cloud'
    FIXOS_DB_MODE: str = DB_MODE_LOCAL
    FIXOS_DATABASE_URL: Optional[str] = None

    FIXOS_SECRET_KEY: str = 'fixos-dev-secret'
    FIXOS_LOG_LEVEL: str = 'INFO'
    FIXOS_LOG_DIR: str = os.path.join(BASE_DIR, 'logs')
    FIXOS_BACKUP_DIR: Optional[str] = None
    FIXOS_HTTP_TIMEOUT: float = 10.0

    # APIs externas
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = 'gemini-1.5-flash'
    GEMINI_URL: str = 'https://generativelanguage.googleapis.com/v1beta/models'
    VIACEP_URL: str = 'https://viacep.com.br/ws'

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def backup_dir(self) -> str:
        return self.FIXOS_BACKUP_DIR or os.path.join(self.FIXOS_DATA_DIR, 'backups')


settings = Settings()
