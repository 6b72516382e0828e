# ==============================================================================
# REPOSITORIO DE CONFIGURACIONES
# ==============================================================================
# Pares clave/valor libres (el valor es cualquier JSON).
# settings.json -> {"businessInfo": {"key": "businessInfo", "value": {...}}}
# ==============================================================================

from dataclasses import dataclass
from typing import Any, Dict

from fixos.repositories.mirrored import MirroredRepository


@dataclass
class SettingEntry:
    key: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {'key': self.key, 'value': self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SettingEntry':
        return cls(key=data.get('key', ''), value=data.get('value'))


class SettingsRepository(MirroredRepository[SettingEntry]):
    entity_cls = SettingEntry
    table_name = 'settings'
    key_field = 'key'
    order_by = 'key'

    def get_setting(self, key: str, default: Any = None) -> Any:
        """
        Obtiene una configuración.

        Args:
            key: Clave de la configuración
            default: Valor si la clave no existe (o es null)

        Returns:
            Valor guardado o default
        """
        entry = self.get(key)
        if entry is None or entry.value is None:
            return default
        return entry.value

    def save_setting(self, key: str, value: Any) -> None:
        self.save(SettingEntry(key=key, value=value))
