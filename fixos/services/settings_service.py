# ==============================================================================
# SERVICIO DE AJUSTES
# ==============================================================================
# Datos del negocio, checklist, términos de impresión, garantía por defecto,
# plantilla de WhatsApp y conexión con la nube.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional, Tuple

from fixos.errors import CloudStorageError, ValidationError
from fixos.models import BusinessInfo
from fixos.repositories.cloud_mirror import CloudMirror
from fixos.repositories.connection_repository import ConnectionRepository
from fixos.repositories.interfaces import ISettingsRepository

logger = logging.getLogger(__name__)

# Claves de configuración
KEY_BUSINESS_INFO = 'business_info'
KEY_CHECKLIST = 'checklist'
KEY_TERMS_ENTRY = 'terms_entry'
KEY_TERMS_BUDGET = 'terms_budget'
KEY_TERMS_EXIT = 'terms_exit'
KEY_DEFAULT_WARRANTY = 'default_warranty'
KEY_WHATSAPP_TEMPLATE = 'whatsapp_template'

DEFAULT_BUSINESS_INFO = {
    'name': 'FIXOS ASSISTÊNCIA',
    'cnpj': '00.000.000/0001-00',
    'phone': '(11) 99999-9999',
    'address': 'Rua das Tecnologias, 101 - Centro',
}
DEFAULT_CHECKLIST = ["Liga", "Tela Íntegra", "Câmeras", "Bateria", "WiFi/Rede", "Carregamento"]
DEFAULT_TERMS_ENTRY = 'ANÁLISE EM 5 DIAS ÚTEIS.'
DEFAULT_TERMS_BUDGET = 'ORÇAMENTO VÁLIDO POR 7 DIAS.'
DEFAULT_TERMS_EXIT = 'GARANTIA DE 90 DIAS.'
DEFAULT_WARRANTY_DAYS = 90
DEFAULT_WHATSAPP_TEMPLATE = (
    'Olá {cliente}! Sua O.S. #{os} ({equipamento}) está com status: {status}. {empresa}'
)

TERMS_KEYS = {
    'entry': (KEY_TERMS_ENTRY, DEFAULT_TERMS_ENTRY),
    'budget': (KEY_TERMS_BUDGET, DEFAULT_TERMS_BUDGET),
    'exit': (KEY_TERMS_EXIT, DEFAULT_TERMS_EXIT),
}


class SettingsService:
    """
    Servicio de configuraciones del negocio.

    Los valores viven en la tabla 'settings' (espejada en la nube).
    La conexión con la nube vive aparte, solo en la base local.
    """

    def __init__(self, settings_repo: ISettingsRepository, connection: ConnectionRepository):
        self.settings_repo = settings_repo
        self.connection = connection

    # =========================================================================
    # Datos del negocio
    # =========================================================================

    def get_business_info(self) -> BusinessInfo:
        """Datos de la empresa para impresos y mensajes (valores de ejemplo si no se guardaron)."""
        data = self.settings_repo.get_setting(KEY_BUSINESS_INFO, DEFAULT_BUSINESS_INFO)
        return BusinessInfo.from_dict(data if isinstance(data, dict) else DEFAULT_BUSINESS_INFO)

    def save_business_info(self, data: Dict[str, Any]) -> BusinessInfo:
        """
        Guarda los datos de la empresa.

        Args:
            data: name, cnpj, phone, address, logo_url

        Raises:
            ValidationError: si falta el nombre
        """
        info = BusinessInfo.from_dict(data)
        if not info.name.strip():
            raise ValidationError('Nome da empresa é obrigatório.')
        self.settings_repo.save_setting(KEY_BUSINESS_INFO, info.to_dict())
        return info

    # =========================================================================
    # Checklist y términos
    # =========================================================================

    def get_checklist(self) -> List[str]:
        items = self.settings_repo.get_setting(KEY_CHECKLIST, DEFAULT_CHECKLIST)
        return list(items) if isinstance(items, list) else list(DEFAULT_CHECKLIST)

    def save_checklist(self, items: List[str]) -> List[str]:
        """
        Reemplaza los ítems del checklist de entrada.

        Returns:
            Lista guardada (sin ítems vacíos)
        """
        if not isinstance(items, list):
            raise ValidationError('Checklist deve ser uma lista.')
        cleaned = [str(i).strip() for i in items if str(i).strip()]
        self.settings_repo.save_setting(KEY_CHECKLIST, cleaned)
        return cleaned

    def get_terms(self, kind: str) -> str:
        """kind: 'entry', 'budget' o 'exit'."""
        if kind not in TERMS_KEYS:
            raise ValidationError(f"Tipo de termo inválido: {kind}")
        key, default = TERMS_KEYS[kind]
        return self.settings_repo.get_setting(key, default)

    def save_terms(self, kind: str, text: str) -> str:
        """
        Guarda un texto de términos para impresión.

        Args:
            kind: 'entry', 'budget' o 'exit'
            text: Texto libre

        Raises:
            ValidationError: tipo de término desconocido
        """
        if kind not in TERMS_KEYS:
            raise ValidationError(f"Tipo de termo inválido: {kind}")
        key, _ = TERMS_KEYS[kind]
        self.settings_repo.save_setting(key, text or '')
        return text or ''

    def get_all_terms(self) -> Dict[str, str]:
        return {kind: self.get_terms(kind) for kind in TERMS_KEYS}

    # =========================================================================
    # Garantía y mensajes
    # =========================================================================

    def get_default_warranty(self) -> int:
        value = self.settings_repo.get_setting(KEY_DEFAULT_WARRANTY, DEFAULT_WARRANTY_DAYS)
        try:
            return int(value)
        except (TypeError, ValueError):
            return DEFAULT_WARRANTY_DAYS

    def save_default_warranty(self, days: Any) -> int:
        """
        Raises:
            ValidationError: días no numéricos o negativos
        """
        try:
            days = int(days)
        except (TypeError, ValueError):
            raise ValidationError('Garantia deve ser um número de dias.')
        if days < 0:
            raise ValidationError('Garantia não pode ser negativa.')
        self.settings_repo.save_setting(KEY_DEFAULT_WARRANTY, days)
        return days

    def get_whatsapp_template(self) -> str:
        return self.settings_repo.get_setting(KEY_WHATSAPP_TEMPLATE, DEFAULT_WHATSAPP_TEMPLATE)

    def save_whatsapp_template(self, template: str) -> str:
        if not (template or '').strip():
            raise ValidationError('Modelo de mensagem não pode ser vazio.')
        self.settings_repo.save_setting(KEY_WHATSAPP_TEMPLATE, template)
        return template

    def get_all(self) -> Dict[str, Any]:
        """Todas las configuraciones juntas (pantalla de ajustes)."""
        return {
            'business_info': self.get_business_info().to_dict(),
            'checklist': self.get_checklist(),
            'terms': self.get_all_terms(),
            'default_warranty': self.get_default_warranty(),
            'whatsapp_template': self.get_whatsapp_template(),
            'connection': self.get_connection(),
        }

    # =========================================================================
    # Conexión con la nube (solo local)
    # =========================================================================

    def get_connection(self) -> Dict[str, Any]:
        """Modo (local/cloud) y URL efectivos de la base."""
        config = self.connection.get_config()
        return {'mode': config['mode'], 'url_configured': bool(config['url'])}

    def save_connection(self, mode: str, url: Optional[str]) -> Dict[str, Any]:
        """
        Guarda modo y URL de la base en la nube. Rige desde la próxima operación.

        Raises:
            ValidationError: modo desconocido
        """
        self.connection.save_config(mode, url)
        return self.get_connection()

    def test_cloud(self, url: Optional[str] = None) -> Tuple[bool, str]:
        """
        Prueba la conexión. Con url, prueba esa URL sin guardarla;
        sin url, prueba la configurada.
        """
        url = url or self.connection.get_config()['url']
        if not url:
            return False, 'URL do banco na nuvem não configurada.'
        try:
            mirror = CloudMirror(url)
        except CloudStorageError as e:
            return False, e.message
        try:
            return mirror.test_connection()
        finally:
            mirror.dispose()

    def initialize_cloud(self) -> List[str]:
        """Crea/actualiza las tablas en la nube. Requiere modo nube activo."""
        mirror = self.connection.require_mirror()
        added = mirror.initialize_tables()
        logger.info("Tablas en la nube inicializadas")
        return added
