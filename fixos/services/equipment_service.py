# ==============================================================================
# SERVICIO DE EQUIPOS
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from fixos.errors import NotFoundError, ValidationError
from fixos.models import Equipment
from fixos.repositories.customer_repository import EquipmentRepository
from fixos.repositories.interfaces import IEntityRepository
from fixos.services.customer_service import clean, entities_from, matches

logger = logging.getLogger(__name__)


class EquipmentService:
    """
    Equipos de clientes. La búsqueda también encuentra equipos por el
    nombre del cliente dueño.
    """

    def __init__(self, equipment_repo: EquipmentRepository, customer_repo: IEntityRepository):
        self.equipment_repo = equipment_repo
        self.customer_repo = customer_repo

    def list_equipment(self) -> List[Equipment]:
        return self.equipment_repo.list_all()

    def list_for_customer(self, customer_id: str) -> List[Equipment]:
        """Equipos registrados para un cliente (para el formulario de O.S.)."""
        return self.equipment_repo.list_for_customer(customer_id)

    def search(self, term: Optional[str]) -> List[Equipment]:
        """
        Filtra por marca, modelo, número de serie, tipo o nombre del dueño.

        Args:
            term: Texto a buscar; vacío o None retorna todos
        """
        names = {c.id: c.name for c in self.customer_repo.list_all()}
        return [
            e for e in self.list_equipment()
            if matches(term, e.brand, e.model, e.serial_number, e.type, names.get(e.customer_id))
        ]

    def get_equipment(self, equipment_id: str) -> Equipment:
        equipment = self.equipment_repo.get(equipment_id)
        if equipment is None:
            raise NotFoundError('Equipamento não encontrado.')
        return equipment

    def save_equipment(self, data: Dict[str, Any]) -> Equipment:
        """
        Crea o actualiza un equipo.

        Args:
            data: Campos del equipo (id opcional)

        Raises:
            ValidationError: si falta cliente, marca o modelo
        """
        customer_id = clean(data.get('customer_id'))
        brand = clean(data.get('brand'))
        model = clean(data.get('model'))
        if not customer_id or not brand or not model:
            raise ValidationError('Cliente, marca e modelo são obrigatórios.')
        equipment = Equipment.from_dict({**data, 'customer_id': customer_id,
                                         'brand': brand, 'model': model})
        return self.equipment_repo.save(equipment)

    def replace_equipment(self, records: Any) -> List[Equipment]:
        """
        Reemplaza la tabla local de equipos (importación, sin espejo).

        Returns:
            Equipos guardados, con id generado donde faltaba
        """
        equipment = entities_from(records, Equipment)
        self.equipment_repo.replace_all(equipment)
        logger.info(f"Equipos importados: {len(equipment)} (tabla local reemplazada)")
        return equipment

    def delete_equipment(self, equipment_id: str) -> None:
        if not self.equipment_repo.delete(equipment_id):
            raise NotFoundError('Equipamento não encontrado.')
