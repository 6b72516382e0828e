# ==============================================================================
# SERVICIOS DE CLIENTES Y PROVEEDORES
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from fixos.errors import NotFoundError, ValidationError
from fixos.models import Customer, Supplier
from fixos.repositories.interfaces import IEntityRepository

logger = logging.getLogger(__name__)


def matches(term: Optional[str], *fields: Any) -> bool:
    """Búsqueda por substring sin distinguir mayúsculas. Término vacío = todo."""
    term = (term or '').strip().lower()
    if not term:
        return True
    return any(term in str(f).lower() for f in fields if f)


def clean(value: Any) -> str:
    return str(value).strip() if value is not None else ''


def entities_from(records: Any, entity_cls) -> list:
    """
    Convierte una lista de dicts en entidades para un reemplazo masivo.

    Raises:
        ValidationError: si records no es una lista de objetos válidos
    """
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ValidationError('Lista de registros inválida.')
    try:
        return [entity_cls.from_dict(r) for r in records]
    except (TypeError, ValueError, AttributeError):
        raise ValidationError('Lista de registros inválida.')


class CustomerService:
    """
    Gestión de clientes.

    Responsabilidades:
    - Listar / buscar (nombre, teléfono, documento, e-mail)
    - Guardar con validación (nombre y teléfono obligatorios)
    - Importar (reemplazo masivo de la tabla local)
    - Autocompletar dirección a partir del CEP
    """

    def __init__(self, customer_repo: IEntityRepository, postal_client=None):
        self.customer_repo = customer_repo
        self.postal_client = postal_client

    def list_customers(self) -> List[Customer]:
        """
        Obtiene todos los clientes ordenados por nombre.

        Returns:
            Lista de Customer (de la nube en modo nube, si responde)
        """
        return self.customer_repo.list_all()

    def search(self, term: Optional[str]) -> List[Customer]:
        """
        Filtra clientes por nombre, teléfono, documento o e-mail.

        Args:
            term: Texto a buscar; vacío o None retorna todos
        """
        return [
            c for c in self.list_customers()
            if matches(term, c.name, c.phone, c.document, c.email)
        ]

    def get_customer(self, customer_id: str) -> Customer:
        """
        Raises:
            NotFoundError: si el cliente no existe
        """
        customer = self.customer_repo.get(customer_id)
        if customer is None:
            raise NotFoundError('Cliente não encontrado.')
        return customer

    def replace_customers(self, records: Any) -> List[Customer]:
        """
        Reemplaza la tabla local de clientes por la lista recibida.
        No se espeja en la nube (para eso: SyncService.push_local_to_cloud).

        Args:
            records: Lista de dicts de clientes; sin id se genera uno

        Returns:
            Clientes guardados
        """
        customers = entities_from(records, Customer)
        self.customer_repo.replace_all(customers)
        logger.info(f"Clientes importados: {len(customers)} (tabla local reemplazada)")
        return customers

    def save_customer(self, data: Dict[str, Any]) -> Customer:
        """
        Crea o actualiza un cliente.

        Args:
            data: Campos del cliente (id opcional; sin id se crea uno nuevo)

        Raises:
            ValidationError: si falta nombre o teléfono
        """
        name = clean(data.get('name'))
        phone = clean(data.get('phone'))
        if not name or not phone:
            raise ValidationError('Nome e telefone são obrigatórios.')

        customer = Customer.from_dict({**data, 'name': name, 'phone': phone})
        customer.email = clean(customer.email)
        customer.document = clean(customer.document)
        customer.address = clean(customer.address)
        saved = self.customer_repo.save(customer)
        logger.info(f"Cliente guardado: {saved.id} ({saved.name})")
        return saved

    def delete_customer(self, customer_id: str) -> None:
        """
        Elimina un cliente.

        Raises:
            NotFoundError: si el cliente no existe
        """
        # Equipos y órdenes del cliente se mantienen
        if not self.customer_repo.delete(customer_id):
            raise NotFoundError('Cliente não encontrado.')
        logger.info(f"Cliente eliminado: {customer_id}")

    def lookup_address(self, zip_code: str) -> Optional[str]:
        """Dirección formateada para el CEP, o None si no se encontró."""
        if self.postal_client is None:
            return None
        return self.postal_client.lookup(zip_code)


class SupplierService:
    """Gestión de proveedores (nombre obligatorio)."""

    def __init__(self, supplier_repo: IEntityRepository):
        self.supplier_repo = supplier_repo

    def list_suppliers(self) -> List[Supplier]:
        """Todos los proveedores, ordenados por nombre."""
        return self.supplier_repo.list_all()

    def search(self, term: Optional[str]) -> List[Supplier]:
        """
        Filtra proveedores por nombre, contacto o teléfono.

        Args:
            term: Texto a buscar; vacío o None retorna todos
        """
        return [s for s in self.list_suppliers() if matches(term, s.name, s.contact, s.phone)]

    def save_supplier(self, data: Dict[str, Any]) -> Supplier:
        """
        Crea o actualiza un proveedor.

        Args:
            data: Campos del proveedor (id opcional)

        Raises:
            ValidationError: si falta el nombre
        """
        name = clean(data.get('name'))
        if not name:
            raise ValidationError('Nome do fornecedor é obrigatório.')
        supplier = Supplier.from_dict({**data, 'name': name})
        return self.supplier_repo.save(supplier)

    def delete_supplier(self, supplier_id: str) -> None:
        """
        Raises:
            NotFoundError: si el proveedor no existe
        """
        if not self.supplier_repo.delete(supplier_id):
            raise NotFoundError('Fornecedor não encontrado.')
