# -*- coding: utf-8 -*-
"""
Tests del espejo en la nube (SQLite como base remota), de la doble
escritura y del outbox de sincronización
"""
import pytest
import sqlalchemy as sa

from fixos.config import DB_MODE_CLOUD, DB_MODE_LOCAL
from fixos.errors import CloudStorageError, ValidationError
from fixos.models import Customer
from fixos.repositories import CloudMirror, ICloudMirror
from fixos.repositories.cloud_mirror import CONNECTED_MSG


@pytest.fixture
def mirror(cloud_url):
    m = CloudMirror(cloud_url)
    m.initialize_tables()
    yield m
    m.dispose()


# =============================================================================
# CloudMirror
# =============================================================================

def test_test_connection(cloud_url, broken_cloud_url):
    ok, message = CloudMirror(cloud_url).test_connection()
    assert ok and message == CONNECTED_MSG
    ok, message = CloudMirror(broken_cloud_url).test_connection()
    assert not ok and message


def test_cloud_mirror_implements_interface(mirror):
    assert isinstance(mirror, ICloudMirror)


def test_invalid_url_raises_cloud_error():
    with pytest.raises(CloudStorageError):
        CloudMirror('nao-e-uma-url')


def test_upsert_fetch_and_delete(mirror):
    mirror.upsert('products', {'id': 'p1', 'name': 'Tela', 'price': 120.5, 'stock': 3,
                               'unknown_field': 'ignorado'})
    mirror.upsert('products', {'id': 'p1', 'name': 'Tela OLED', 'price': 150.0, 'stock': 2})
    row = mirror.fetch_one('products', 'p1')
    assert row['name'] == 'Tela OLED'
    assert row['price'] == 150.0

    mirror.delete('products', 'p1')
    assert mirror.fetch_one('products', 'p1') is None


def test_json_columns_round_trip(mirror):
    mirror.upsert('orders', {'id': 'o1', 'order_number': 1001, 'checklist': {'Liga': True},
                             'items': [{'product_id': 'p1', 'quantity': 1}]})
    row = mirror.fetch_one('orders', 'o1')
    assert row['checklist'] == {'Liga': True}
    assert row['items'][0]['product_id'] == 'p1'


def test_fetch_all_ordering(mirror):
    for number in (1001, 1003, 1002):
        mirror.upsert('orders', {'id': f'o{number}', 'order_number': number})
    rows = mirror.fetch_all('orders', 'order_number', descending=True)
    assert [r['order_number'] for r in rows] == [1003, 1002, 1001]


def test_unknown_table_and_missing_key(mirror):
    with pytest.raises(CloudStorageError):
        mirror.fetch_all('users')
    with pytest.raises(CloudStorageError):
        mirror.upsert('customers', {'name': 'Sem id'})


def test_initialize_tables_adds_missing_columns(cloud_url):
    engine = sa.create_engine(cloud_url)
    legacy = sa.MetaData()
    sa.Table('suppliers', legacy, sa.Column('id', sa.String(32), primary_key=True),
             sa.Column('name', sa.Text))
    legacy.create_all(engine)
    engine.dispose()

    mirror = CloudMirror(cloud_url)
    added = mirror.initialize_tables()
    assert 'suppliers.contact' in added
    assert 'suppliers.phone' in added
    assert mirror.initialize_tables() == []
    mirror.dispose()


def test_errors_are_wrapped(broken_cloud_url):
    mirror = CloudMirror(broken_cloud_url)
    with pytest.raises(CloudStorageError):
        mirror.upsert('customers', {'id': 'c1', 'name': 'X'})
    with pytest.raises(CloudStorageError):
        mirror.fetch_all('customers')


# =============================================================================
# Conexión
# =============================================================================

def test_local_mode_has_no_mirror(container):
    assert container.connection.get_config() == {'mode': DB_MODE_LOCAL, 'url': None}
    assert container.connection.get_mirror() is None
    with pytest.raises(ValidationError):
        container.connection.require_mirror()


def test_cloud_mode_without_url_behaves_as_local(container):
    container.connection.save_config(DB_MODE_CLOUD, '  ')
    assert container.connection.get_mirror() is None
    assert not container.sync_service.status()['cloud_enabled']


def test_invalid_mode_rejected(container):
    with pytest.raises(ValidationError):
        container.connection.save_config('hibrido', None)


# =============================================================================
# Doble escritura
# =============================================================================

def test_cloud_mode_writes_reach_the_mirror(cloud_container):
    customer = cloud_container.customer_service.save_customer({'name': 'Bruno', 'phone': '11999990000'})
    mirror = cloud_container.connection.require_mirror()
    assert mirror.fetch_one('customers', customer.id)['name'] == 'Bruno'
    # La copia local siempre existe
    assert customer.id in cloud_container.customer_repo.local_records()
    assert cloud_container.outbox.size() == 0


def test_cloud_mode_reads_prefer_the_mirror(cloud_container):
    mirror = cloud_container.connection.require_mirror()
    mirror.upsert('customers', Customer(id='remote1', name='Só na nuvem', phone='1').to_dict())

    names = [c.name for c in cloud_container.customer_repo.list_all()]
    assert names == ['Só na nuvem']
    assert cloud_container.customer_repo.list_local() == []
    assert cloud_container.customer_repo.get('remote1').name == 'Só na nuvem'


def test_cloud_mode_settings_are_mirrored(cloud_container):
    cloud_container.settings_service.save_default_warranty(30)
    row = cloud_container.connection.require_mirror().fetch_one('settings', 'default_warranty')
    assert row['value'] == 30
    assert cloud_container.settings_service.get_default_warranty() == 30


def test_accounts_use_cloud_table_name(cloud_container):
    account = cloud_container.account_service.save_account({
        'description': 'Aluguel', 'amount': 1200, 'due_date': '2024-06-05'})
    row = cloud_container.connection.require_mirror().fetch_one('financial_accounts', account.id)
    assert row['amount'] == 1200.0


def test_delete_is_mirrored(cloud_container):
    supplier = cloud_container.supplier_service.save_supplier({'name': 'Distribuidora'})
    cloud_container.supplier_service.delete_supplier(supplier.id)
    assert cloud_container.connection.require_mirror().fetch_one('suppliers', supplier.id) is None
    assert cloud_container.supplier_repo.local_records() == {}


def test_broken_mirror_falls_back_to_local_and_queues(container, broken_cloud_url):
    saved = container.customer_service.save_customer({'name': 'Carla', 'phone': '1133334444'})
    container.connection.save_config(DB_MODE_CLOUD, broken_cloud_url)

    # Lectura: la nube falla, se usa la base local
    assert [c.name for c in container.customer_service.list_customers()] == ['Carla']

    # Escritura: se guarda localmente y queda en el outbox
    other = container.customer_service.save_customer({'name': 'Daniel', 'phone': '1155556666'})
    assert other.id in container.customer_repo.local_records()
    pending = container.outbox.pending()
    assert len(pending) == 1
    assert pending[0]['table'] == 'customers'
    assert pending[0]['op'] == 'upsert'
    assert pending[0]['payload']['name'] == 'Daniel'
    assert pending[0]['last_error']

    container.customer_service.delete_customer(saved.id)
    ops = {(e['key'], e['op']) for e in container.outbox.pending()}
    assert (saved.id, 'delete') in ops


# =============================================================================
# SyncService
# =============================================================================

def test_replay_drains_outbox_once_cloud_is_ready(container, cloud_url):
    # Base remota sin tablas: la escritura falla y queda pendiente
    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    customer = container.customer_service.save_customer({'name': 'Eva', 'phone': '11911112222'})
    assert container.outbox.size() == 1

    failed = container.sync_service.replay_outbox()
    assert failed == {'applied': 0, 'failed': 1, 'pending': 1}
    assert container.outbox.pending()[0]['attempts'] == 2

    container.settings_service.initialize_cloud()
    result = container.sync_service.replay_outbox()
    assert result == {'applied': 1, 'failed': 0, 'pending': 0}
    row = container.connection.require_mirror().fetch_one('customers', customer.id)
    assert row['name'] == 'Eva'


def test_replay_applies_queued_deletes(container, cloud_url):
    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    container.settings_service.initialize_cloud()
    mirror = container.connection.require_mirror()
    mirror.upsert('suppliers', {'id': 's1', 'name': 'Antigo'})
    container.outbox.enqueue('suppliers', 'delete', 's1', error='offline')

    assert container.sync_service.replay_outbox()['applied'] == 1
    assert mirror.fetch_one('suppliers', 's1') is None


def test_replay_requires_cloud_mode(container):
    with pytest.raises(ValidationError):
        container.sync_service.replay_outbox()


def test_push_local_to_cloud(container, cloud_url):
    container.customer_service.save_customer({'name': 'Fábio', 'phone': '1100000000'})
    container.product_service.save_product({'name': 'Bateria', 'price': 80, 'stock': 4})
    container.settings_service.save_terms('entry', 'ANÁLISE EM 3 DIAS.')

    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    container.settings_service.initialize_cloud()
    result = container.sync_service.push_local_to_cloud()

    assert result['errors'] == []
    assert result['pushed']['customers'] == 1
    assert result['pushed']['products'] == 1
    assert result['pushed']['settings'] == 1
    assert len(container.customer_repo.list_all()) == 1


def test_sync_status(container, cloud_url):
    status = container.sync_service.status()
    assert status == {'mode': 'local', 'url_configured': False, 'cloud_enabled': False, 'pending': 0}
    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    status = container.sync_service.status()
    assert status['cloud_enabled'] and status['url_configured']


def test_settings_test_cloud(container, cloud_url, broken_cloud_url):
    assert container.settings_service.test_cloud() == (False, 'URL do banco na nuvem não configurada.')
    assert container.settings_service.test_cloud(cloud_url) == (True, CONNECTED_MSG)
    ok, _ = container.settings_service.test_cloud(broken_cloud_url)
    assert not ok


# =============================================================================
# Outbox frente a escrituras nuevas
# =============================================================================

def test_successful_save_drops_stale_queued_upsert(container, cloud_url):
    # Base remota sin tablas: la primera versión queda pendiente
    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    customer = container.customer_service.save_customer({'name': 'Versão 1', 'phone': '11900000001'})
    assert container.outbox.size() == 1

    container.settings_service.initialize_cloud()
    container.customer_service.save_customer({**customer.to_dict(), 'name': 'Versão 2'})
    assert container.outbox.size() == 0

    assert container.sync_service.replay_outbox() == {'applied': 0, 'failed': 0, 'pending': 0}
    mirror = container.connection.require_mirror()
    assert mirror.fetch_one('customers', customer.id)['name'] == 'Versão 2'
    assert container.customer_repo.local_records()[customer.id]['name'] == 'Versão 2'


def test_successful_delete_drops_queued_upsert(container, cloud_url):
    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    customer = container.customer_service.save_customer({'name': 'Zumbi', 'phone': '11900000002'})
    assert container.outbox.size() == 1

    container.settings_service.initialize_cloud()
    container.customer_service.delete_customer(customer.id)
    assert container.outbox.size() == 0

    container.sync_service.replay_outbox()
    assert container.connection.require_mirror().fetch_one('customers', customer.id) is None


def test_failed_delete_then_successful_save_keeps_row(container, cloud_url):
    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    container.settings_service.initialize_cloud()
    supplier = container.supplier_service.save_supplier({'name': 'Peças SA'})
    container.outbox.enqueue('suppliers', 'delete', supplier.id, error='offline')

    container.supplier_service.save_supplier({**supplier.to_dict(), 'contact': 'Rita'})
    container.sync_service.replay_outbox()
    row = container.connection.require_mirror().fetch_one('suppliers', supplier.id)
    assert row['contact'] == 'Rita'


def test_push_clears_outbox_entries_it_overwrites(container, cloud_url):
    customer = container.customer_service.save_customer({'name': 'Atual', 'phone': '11900000003'})
    container.outbox.enqueue('customers', 'upsert', customer.id,
                             {**customer.to_dict(), 'name': 'Antigo'}, error='offline')
    container.outbox.enqueue('suppliers', 'delete', 'removido', error='offline')

    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    container.settings_service.initialize_cloud()
    result = container.sync_service.push_local_to_cloud()
    assert result['pushed']['customers'] == 1

    # Solo queda el borrado de un registro que ya no existe localmente
    assert [(e['table'], e['key']) for e in container.outbox.pending()] == [('suppliers', 'removido')]
    container.sync_service.replay_outbox()
    assert container.connection.require_mirror().fetch_one('customers', customer.id)['name'] == 'Atual'


def test_bulk_replace_is_local_only(cloud_container):
    products = cloud_container.product_service.replace_products([{'name': 'Tela', 'price': 100, 'stock': 2}])
    assert list(cloud_container.product_repo.local_records()) == [products[0].id]
    assert cloud_container.connection.require_mirror().fetch_all('products') == []
    assert cloud_container.outbox.size() == 0
