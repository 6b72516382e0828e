# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
# Los servicios dependen de estos protocolos, no de las clases concretas.
# Los tests pueden pasar cualquier objeto que los cumpla.
# ==============================================================================

from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class IEntityRepository(Protocol):
    """
    Contrato de un repositorio de entidad (local + nube).
    Usado por: clientes, equipos, proveedores, productos, órdenes,
    ventas y cuentas.
    """

    def list_all(self) -> List[Any]:
        """Todos los registros, con el orden propio de la entidad."""
        ...

    def get(self, record_id: str) -> Optional[Any]:
        """Un registro por id, o None."""
        ...

    def save(self, entity: Any) -> Any:
        """Inserta o actualiza; genera id si falta."""
        ...

    def delete(self, record_id: str) -> bool:
        """Elimina; retorna si existía."""
        ...

    def replace_all(self, entities: Iterable[Any]) -> None:
        """Reemplazo completo de la tabla local."""
        ...


@runtime_checkable
class ISettingsRepository(Protocol):

    def get_setting(self, key: str, default: Any = None) -> Any:
        ...

    def save_setting(self, key: str, value: Any) -> None:
        ...


@runtime_checkable
class ICloudMirror(Protocol):
    """Base relacional remota."""

    def test_connection(self) -> Tuple[bool, str]:
        ...

    def initialize_tables(self) -> List[str]:
        ...

    def upsert(self, table_name: str, row: Dict[str, Any]) -> None:
        ...

    def delete(self, table_name: str, key: str) -> None:
        ...

    def fetch_all(self, table_name: str, order_by: Optional[str] = None,
                  descending: bool = False) -> List[Dict[str, Any]]:
        ...

    def fetch_one(self, table_name: str, key: str) -> Optional[Dict[str, Any]]:
        ...
