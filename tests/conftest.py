import os

import pytest

from fixos.app_container import AppContainer, get_container
from fixos.config import DB_MODE_CLOUD, Settings
from fixos.main import create_app
from fixos.repositories import LocalDatabase
from fixos.services.cart_service import CartService


@pytest.fixture
def settings(tmp_path):
    """Configuración aislada: datos, logs y backups dentro de tmp_path."""
    return Settings(
        FIXOS_DATA_DIR=str(tmp_path / 'data'),
        FIXOS_LOG_DIR=str(tmp_path / 'logs'),
        FIXOS_BACKUP_DIR=str(tmp_path / 'backups'),
        FIXOS_DB_MODE='local',
        FIXOS_DATABASE_URL=None,
        FIXOS_SECRET_KEY='test-secret',
        GEMINI_API_KEY=None,
    )


@pytest.fixture
def local_db(settings):
    return LocalDatabase(settings.FIXOS_DATA_DIR)


@pytest.fixture
def container(settings):
    AppContainer.reset_instance()
    c = get_container(settings)
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def cloud_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cloud.db'}"


@pytest.fixture
def broken_cloud_url(tmp_path):
    # Directorio inexistente: el engine se crea pero toda conexión falla
    return f"sqlite:///{os.path.join(str(tmp_path), 'missing', 'dir', 'cloud.db')}"


@pytest.fixture
def cloud_container(container, cloud_url):
    """Contenedor en modo nube con las tablas remotas ya creadas."""
    container.connection.save_config(DB_MODE_CLOUD, cloud_url)
    container.settings_service.initialize_cloud()
    return container


@pytest.fixture
def cart(container):
    return CartService(container.product_service, storage={})


@pytest.fixture
def app(settings):
    application = create_app(settings, testing=True)
    yield application
    AppContainer.reset_instance()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def customer(container):
    return container.customer_service.save_customer({'name': 'Ana Souza', 'phone': '(11) 98765-4321'})


@pytest.fixture
def equipment(container, customer):
    return container.equipment_service.save_equipment({
        'customer_id': customer.id, 'brand': 'Apple', 'model': 'iPhone 12',
    })
