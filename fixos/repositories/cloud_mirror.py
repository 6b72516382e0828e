# ==============================================================================
# ESPEJO EN LA NUBE - Base relacional opcional vía SQLAlchemy
# ==============================================================================
# Réplica de las tablas locales en una base SQL (PostgreSQL en producción,
# SQLite en tests). Todo error del driver se convierte en CloudStorageError;
# decidir qué hacer con él es responsabilidad de quien llama.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from fixos.errors import CloudStorageError
from fixos.repositories.cloud_schema import metadata

logger = logging.getLogger(__name__)

CONNECTED_MSG = "Conectado com sucesso ao banco na nuvem!"
INITIALIZED_MSG = "Banco sincronizado!"


class CloudMirror:
    """
    Acceso a la base SQL remota.

    Operaciones:
    - test_connection() -> (ok, mensaje)
    - initialize_tables(): crea tablas y agrega columnas faltantes
    - upsert / delete / fetch_all / fetch_one
    """

    def __init__(self, url: str, engine: Optional[sa.engine.Engine] = None):
        self.url = url
        if engine is None:
            try:
                engine = sa.create_engine(url, pool_pre_ping=True)
            except (SQLAlchemyError, ImportError) as e:
                raise CloudStorageError(f"URL de conexão inválida: {e}") from e
        self.engine = engine

    def dispose(self) -> None:
        self.engine.dispose()

    # =========================================================================
    # Conexión y esquema
    # =========================================================================

    def test_connection(self) -> Tuple[bool, str]:
        try:
            with self.engine.connect() as conn:
                conn.execute(sa.text('SELECT 1'))
        except SQLAlchemyError as e:
            logger.warning(f"Prueba de conexión a la nube falló: {e}")
            return False, str(e.orig) if getattr(e, 'orig', None) else str(e)
        return True, CONNECTED_MSG

    def initialize_tables(self) -> List[str]:
        """
        Crea las tablas que falten y agrega columnas nuevas a las existentes.

        Returns:
            Lista de columnas agregadas ("tabla.columna")
        """
        added = []
        try:
            metadata.create_all(self.engine)
            inspector = sa.inspect(self.engine)
            with self.engine.begin() as conn:
                for table in metadata.sorted_tables:
                    existing = {c['name'] for c in inspector.get_columns(table.name)}
                    for column in table.columns:
                        if column.name in existing:
                            continue
                        col_type = column.type.compile(dialect=self.engine.dialect)
                        conn.execute(sa.text(
                            f'ALTER TABLE {table.name} ADD COLUMN {column.name} {col_type}'
                        ))
                        added.append(f"{table.name}.{column.name}")
        except SQLAlchemyError as e:
            raise CloudStorageError(f"Erro: {e}") from e
        if added:
            logger.info(f"Columnas agregadas en la nube: {', '.join(added)}")
        return added

    # =========================================================================
    # Lectura / escritura
    # =========================================================================

    def _table(self, name: str) -> sa.Table:
        table = metadata.tables.get(name)
        if table is None:
            raise CloudStorageError(f"Tabla desconocida en la nube: {name}")
        return table

    @staticmethod
    def _pk(table: sa.Table) -> sa.Column:
        return list(table.primary_key.columns)[0]

    def _insert(self, table: sa.Table):
        dialect = self.engine.dialect.name
        if dialect == 'postgresql':
            return postgresql.insert(table)
        if dialect == 'sqlite':
            return sqlite.insert(table)
        raise CloudStorageError(f"Dialeto sem suporte a upsert: {dialect}")

    def upsert(self, table_name: str, row: Dict[str, Any]) -> None:
        """Inserta o actualiza por clave primaria. Ignora claves sin columna."""
        table = self._table(table_name)
        pk = self._pk(table)
        values = {k: v for k, v in row.items() if k in table.c}
        if values.get(pk.name) in (None, ''):
            raise CloudStorageError(f"Registro sem chave para {table_name}")

        stmt = self._insert(table).values(**values)
        updates = {k: stmt.excluded[k] for k in values if k != pk.name}
        if updates:
            stmt = stmt.on_conflict_do_update(index_elements=[pk.name], set_=updates)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=[pk.name])
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            raise CloudStorageError(f"Erro ao gravar em {table_name}: {e}") from e

    def delete(self, table_name: str, key: str) -> None:
        table = self._table(table_name)
        try:
            with self.engine.begin() as conn:
                conn.execute(sa.delete(table).where(self._pk(table) == key))
        except SQLAlchemyError as e:
            raise CloudStorageError(f"Erro ao excluir de {table_name}: {e}") from e

    def fetch_all(self, table_name: str, order_by: Optional[str] = None,
                  descending: bool = False) -> List[Dict[str, Any]]:
        table = self._table(table_name)
        stmt = sa.select(table)
        if order_by:
            col = table.c[order_by]
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        try:
            with self.engine.connect() as conn:
                return [dict(r._mapping) for r in conn.execute(stmt)]
        except SQLAlchemyError as e:
            raise CloudStorageError(f"Erro ao ler {table_name}: {e}") from e

    def fetch_one(self, table_name: str, key: str) -> Optional[Dict[str, Any]]:
        table = self._table(table_name)
        stmt = sa.select(table).where(self._pk(table) == key)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).first()
        except SQLAlchemyError as e:
            raise CloudStorageError(f"Erro ao ler {table_name}: {e}") from e
        return dict(row._mapping) if row is not None else None
