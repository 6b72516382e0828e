# -*- coding: utf-8 -*-
"""
Test del sistema de backups de la base local (formato ZIP)
"""
import os
import zipfile
from datetime import datetime

from fixos.services.backup_service import BackupService


def _today_name():
    return f"backup_{datetime.now().strftime('%Y-%m-%d')}.zip"


def _fake_backup(backup_dir, date):
    with zipfile.ZipFile(os.path.join(backup_dir, f'backup_{date}.zip'), 'w') as zf:
        zf.writestr('customers.json', '{}')


def test_create_backup_zips_all_tables(container):
    container.customer_service.save_customer({'name': 'Ana', 'phone': '1'})
    service = container.backup_service
    result = service.create_backup()

    assert result['success']
    assert result['files_added'] == len(container.local_db.table_files())
    assert os.path.basename(result['backup_path']) == _today_name()
    with zipfile.ZipFile(result['backup_path']) as zf:
        names = zf.namelist()
        assert 'schema.json' in names
        assert 'customers.json' in names
        assert 'Ana' in zf.read('customers.json').decode('utf-8')


def test_backup_once_per_day_unless_forced(container):
    service = container.backup_service
    service.create_backup()
    again = service.create_backup()
    assert again['success'] and again['files_added'] == 0
    assert again['message'] == 'Backup do dia já existe'
    forced = service.create_backup(force=True)
    assert forced['files_added'] > 0


def test_rotation_keeps_last_seven(container):
    service = container.backup_service
    for day in range(1, 10):
        _fake_backup(service.backup_root, f'2020-01-{day:02d}')
    # Archivos ajenos no se tocan
    open(os.path.join(service.backup_root, 'notas.txt'), 'w').close()
    _fake_backup(service.backup_root, 'sem-data')

    result = service.rotate_backups()
    assert result == {'deleted_count': 2, 'remaining_count': 7}
    remaining = service.list_backups()
    assert remaining[0] == 'backup_2020-01-09.zip'
    assert remaining[-1] == 'backup_2020-01-03.zip'
    assert os.path.exists(os.path.join(service.backup_root, 'notas.txt'))


def test_daily_backup_and_status(container):
    service = container.backup_service
    _fake_backup(service.backup_root, '2020-01-01')
    summary = service.run_daily_backup()
    assert summary['backup']['success']
    assert summary['rotation']['remaining_count'] == 2

    status = service.get_backup_status()
    assert status['total_backups'] == 2
    assert status['max_backups'] == BackupService.MAX_BACKUPS == 7
    assert status['today_exists']
    assert status['backups'][0]['filename'] == _today_name()
    assert status['backups'][1]['files'] == 1


def test_backup_dir_defaults_inside_data_dir(settings):
    settings.FIXOS_BACKUP_DIR = None
    assert settings.backup_dir == os.path.join(settings.FIXOS_DATA_DIR, 'backups')
