# ==============================================================================
# SERVICIO DE BACKUPS DE LA BASE LOCAL
# ==============================================================================
# ZIP diario con todas las tablas JSON y schema.json.
# Se conservan los últimos MAX_BACKUPS archivos.
#
# FORMATO: backup_YYYY-MM-DD.zip
# ==============================================================================

import logging
import os
import zipfile
from datetime import datetime
from typing import Any, Dict, List, Tuple

from fixos.repositories.local_store import LocalDatabase

logger = logging.getLogger(__name__)

BACKUP_PREFIX = 'backup_'
BACKUP_SUFFIX = '.zip'


class BackupService:
    """
    Responsabilidades:
    - Crear el backup del día (una vez por día salvo force)
    - Rotar backups antiguos
    - Informar el estado de la carpeta de backups
    """

    MAX_BACKUPS = 7

    def __init__(self, local_db: LocalDatabase, backup_dir: str):
        self.local_db = local_db
        self.backup_root = backup_dir
        os.makedirs(self.backup_root, exist_ok=True)

    def _today_zip_path(self) -> str:
        today = datetime.now().strftime('%Y-%m-%d')
        return os.path.join(self.backup_root, f'{BACKUP_PREFIX}{today}{BACKUP_SUFFIX}')

    def _backup_exists_today(self) -> bool:
        path = self._today_zip_path()
        return os.path.exists(path) and os.path.getsize(path) > 0

    def list_backups(self) -> List[str]:
        """Nombres backup_YYYY-MM-DD.zip, el más reciente primero."""
        backups = []
        for name in os.listdir(self.backup_root):
            if not (name.startswith(BACKUP_PREFIX) and name.endswith(BACKUP_SUFFIX)):
                continue
            if not os.path.isfile(os.path.join(self.backup_root, name)):
                continue
            try:
                datetime.strptime(name[len(BACKUP_PREFIX):-len(BACKUP_SUFFIX)], '%Y-%m-%d')
            except ValueError:
                continue
            backups.append(name)
        backups.sort(reverse=True)
        return backups

    def _write_zip(self, zip_path: str) -> Tuple[int, List[str]]:
        added = 0
        errors = []
        try:
            with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as zf:
                for src in self.local_db.table_files():
                    try:
                        zf.write(src, os.path.basename(src))
                        added += 1
                    except OSError as e:
                        errors.append(f"{os.path.basename(src)}: {e}")
        except (OSError, zipfile.BadZipFile) as e:
            errors.append(f"Erro ao criar ZIP: {e}")
            if os.path.exists(zip_path):
                os.remove(zip_path)
        return added, errors

    def create_backup(self, force: bool = False) -> Dict[str, Any]:
        """
        Args:
            force: crear aunque ya exista el backup de hoy

        Returns:
            {success, message, files_added, errors, backup_path}
        """
        zip_path = self._today_zip_path()
        if not force and self._backup_exists_today():
            logger.info(f"Backup de hoy ya existe: {os.path.basename(zip_path)}")
            return {'success': True, 'message': 'Backup do dia já existe', 'files_added': 0,
                    'errors': [], 'backup_path': zip_path}

        added, errors = self._write_zip(zip_path)
        for error in errors:
            logger.warning(f"Backup: {error}")
        if added == 0:
            return {'success': False, 'message': 'Nenhum arquivo para copiar', 'files_added': 0,
                    'errors': errors, 'backup_path': None}

        size_kb = round(os.path.getsize(zip_path) / 1024, 2)
        logger.info(f"Backup creado: {os.path.basename(zip_path)} ({added} archivos, {size_kb} KB)")
        return {'success': True, 'message': f'Backup criado: {added} arquivos ({size_kb} KB)',
                'files_added': added, 'errors': errors, 'backup_path': zip_path}

    def rotate_backups(self) -> Dict[str, int]:
        """
        Elimina los backups más antiguos que excedan MAX_BACKUPS.

        Returns:
            {"deleted_count": n, "remaining_count": n}
        """
        backups = self.list_backups()
        deleted = 0
        for name in backups[self.MAX_BACKUPS:]:
            try:
                os.remove(os.path.join(self.backup_root, name))
                deleted += 1
                logger.info(f"Backup antiguo eliminado: {name}")
            except OSError as e:
                logger.warning(f"No se pudo eliminar {name}: {e}")
        return {'deleted_count': deleted, 'remaining_count': len(self.list_backups())}

    def run_daily_backup(self) -> Dict[str, Any]:
        """Backup del día (si aún no existe) + rotación. Se llama al iniciar la app."""
        return {'backup': self.create_backup(), 'rotation': self.rotate_backups()}

    def get_backup_status(self) -> Dict[str, Any]:
        """
        Estado de los backups para la pantalla de Ajustes.

        Returns:
            Dict con backups (nombre, fecha, archivos, tamaño), totales,
            directorio y si ya existe el backup de hoy
        """
        info = []
        for name in self.list_backups():
            path = os.path.join(self.backup_root, name)
            size = os.path.getsize(path)
            try:
                with zipfile.ZipFile(path, 'r') as zf:
                    files = len(zf.namelist())
            except zipfile.BadZipFile:
                logger.warning(f"Backup corrupto: {name}")
                files = 0
            info.append({
                'filename': name,
                'date': name[len(BACKUP_PREFIX):-len(BACKUP_SUFFIX)],
                'files': files,
                'size_bytes': size,
                'size_kb': round(size / 1024, 2),
            })
        return {
            'total_backups': len(info),
            'max_backups': self.MAX_BACKUPS,
            'backup_root': self.backup_root,
            'backups': info,
            'today_exists': self._backup_exists_today(),
        }
