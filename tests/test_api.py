# -*- coding: utf-8 -*-
"""
Tests de la API JSON (cliente de pruebas de Flask)
"""
import os

import pytest

from fixos.app_container import get_container
from fixos.performance_logger import PERFORMANCE_LOG
from fixos.services import postal_code_client


def _ok(response, status=200):
    assert response.status_code == status, response.get_data(as_text=True)
    data = response.get_json()
    assert data['success'] is True
    return data


@pytest.fixture
def customer_id(client):
    data = _ok(client.post('/api/customers', json={'name': 'Ana Souza', 'phone': '(11) 98765-4321'}))
    return data['customer']['id']


@pytest.fixture
def product_id(client):
    data = _ok(client.post('/api/products', json={'name': 'Conector', 'price': 50, 'cost': 20, 'stock': 5}))
    return data['product']['id']


def test_errors_are_json(client):
    response = client.post('/api/customers', json={'name': 'Sem telefone'})
    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'error': 'Nome e telefone são obrigatórios.'}

    response = client.get('/api/orders/nao-existe')
    assert response.status_code == 404
    assert response.get_json()['success'] is False

    response = client.get('/api/rota-inexistente')
    assert response.status_code == 404
    assert response.get_json()['success'] is False


def test_customer_endpoints(client, customer_id):
    assert _ok(client.get(f'/api/customers/{customer_id}'))['customer']['name'] == 'Ana Souza'
    assert len(_ok(client.get('/api/customers?q=souza'))['customers']) == 1
    assert _ok(client.get('/api/customers?q=pedro'))['customers'] == []
    _ok(client.delete(f'/api/customers/{customer_id}'))
    assert client.get(f'/api/customers/{customer_id}').status_code == 404


def test_address_lookup(client, monkeypatch):
    class Response:
        def raise_for_status(self):
            pass

        def json(self):
            return {'logradouro': 'Av. Paulista', 'bairro': 'Bela Vista', 'localidade': 'São Paulo', 'uf': 'SP'}

    monkeypatch.setattr(postal_code_client.requests, 'get', lambda url, timeout: Response())
    data = _ok(client.get('/api/customers/address/01310-100'))
    assert data['address'] == 'Av. Paulista, Bela Vista, São Paulo - SP'
    assert client.get('/api/customers/address/123').status_code == 404


def test_order_flow(client, customer_id, product_id):
    data = _ok(client.post('/api/orders', json={
        'order': {
            'customer_id': customer_id,
            'items': [{'product_id': product_id, 'quantity': 1}],
            'labor_cost': 20,
            'diagnosis_fee': 30,
            'problem_description': 'Não carrega',
        },
        'new_equipment': {'brand': 'Apple', 'model': 'iPhone 12'},
    }))
    order = data['order']
    assert order['order_number'] == 1001
    assert order['total'] == 100.0

    order_id = order['id']
    assert _ok(client.get('/api/orders?q=1001'))['orders'][0]['id'] == order_id

    changed = _ok(client.post(f'/api/orders/{order_id}/status',
                              json={'status': 'Em Reparo', 'note': 'Iniciado'}))
    assert changed['order']['history'][-1]['note'] == 'Iniciado'

    _ok(client.post(f'/api/orders/{order_id}/occurrences',
                    json={'description': 'Cliente ligou'}), status=201)

    html = client.get(f'/api/orders/{order_id}/print?auto_print=0')
    assert html.status_code == 200
    assert html.mimetype == 'text/html'
    assert 'TAXA DE DIAGNÓSTICO' in html.get_data(as_text=True)

    link = _ok(client.get(f'/api/orders/{order_id}/notify'))
    assert link['url'].startswith('https://wa.me/5511987654321')

    closed = _ok(client.post('/api/orders', json={'order': {'id': order_id}, 'closing': True}))
    assert closed['order']['status'] == 'Entregue'
    assert closed['order']['payment_status'] == 'Pago'

    dashboard = _ok(client.get('/api/dashboard'))['stats']
    assert dashboard['os_revenue'] == 100.0
    assert dashboard['status_counts']['Entregue'] == 1

    finance = _ok(client.get('/api/finance'))
    assert finance['os_revenue'] == 100.0

    _ok(client.delete(f'/api/orders/{order_id}'))
    assert _ok(client.get('/api/orders'))['orders'] == []


def test_quick_customer_and_ai_fallbacks(client):
    created = _ok(client.post('/api/orders/quick-customer', json={'name': 'Rita', 'phone': '1199'}), status=201)
    assert created['customer']['name'] == 'Rita'
    assert client.post('/api/orders/quick-customer', json={'name': 'Rita'}).status_code == 400

    report = _ok(client.post('/api/orders/technical-report', json={'problem_description': 'Tela piscando'}))
    assert report['report'] == 'Não foi possível gerar sugestão automática.'
    assert client.post('/api/orders/technical-report', json={}).status_code == 400

    assert _ok(client.get('/api/dashboard/insights'))['insights'] == 'Dicas de IA indisponíveis no momento.'


def test_cart_checkout_flow(client, customer_id, product_id):
    added = _ok(client.post('/api/cart/items', json={'product_id': product_id, 'quantity': 2}))
    assert added['total'] == 100.0

    too_many = client.post('/api/cart/items', json={'product_id': product_id, 'quantity': 4})
    assert too_many.status_code == 400
    assert too_many.get_json()['error'] == 'Estoque insuficiente!'

    sale = _ok(client.post('/api/cart/checkout', json={'customer_id': customer_id, 'payment_method': 'Pix'}),
               status=201)['sale']
    assert sale['total'] == 100.0
    assert sale['payment_method'] == 'Pix'

    assert _ok(client.get('/api/cart'))['items'] == []
    assert client.post('/api/cart/checkout', json={}).status_code == 400

    products = _ok(client.get('/api/products?for_sale=1'))['products']
    assert products[0]['stock'] == 3
    assert len(_ok(client.get('/api/sales'))['sales']) == 1


def test_cart_remove_and_clear(client, product_id):
    _ok(client.post('/api/cart/items', json={'product_id': product_id}))
    assert _ok(client.delete(f'/api/cart/items/{product_id}'))['items'] == []
    _ok(client.post('/api/cart/items', json={'product_id': product_id}))
    _ok(client.post('/api/cart/clear'))
    assert _ok(client.get('/api/cart'))['total_items'] == 0


def test_product_stock_endpoint(client, product_id):
    assert _ok(client.post(f'/api/products/{product_id}/stock', json={'delta': -2}))['product']['stock'] == 3
    assert client.post(f'/api/products/{product_id}/stock', json={'delta': 'x'}).status_code == 400


def test_accounts_endpoints(client):
    _ok(client.post('/api/accounts', json={'description': 'Aluguel', 'amount': 1500, 'due_date': '2024-05-10'}))
    receivable = _ok(client.post('/api/accounts', json={
        'description': 'Conserto', 'amount': 200, 'due_date': '2024-05-12', 'type': 'RECEBER'}))['account']

    listed = _ok(client.get('/api/accounts'))
    assert listed['summary'] == {'pending_payable': 1500.0, 'pending_receivable': 200.0}
    filtered = _ok(client.get('/api/accounts?type=RECEBER'))
    assert [a['id'] for a in filtered['accounts']] == [receivable['id']]

    assert _ok(client.post(f"/api/accounts/{receivable['id']}/toggle"))['account']['status'] == 'PAGO'
    _ok(client.delete(f"/api/accounts/{receivable['id']}"))
    assert len(_ok(client.get('/api/accounts'))['accounts']) == 1


def test_suppliers_and_equipment_endpoints(client, customer_id):
    supplier = _ok(client.post('/api/suppliers', json={'name': 'Distribuidora'}))['supplier']
    assert len(_ok(client.get('/api/suppliers'))['suppliers']) == 1
    _ok(client.delete(f"/api/suppliers/{supplier['id']}"))

    equipment = _ok(client.post('/api/equipment', json={
        'customer_id': customer_id, 'brand': 'Samsung', 'model': 'S21'}))['equipment']
    assert _ok(client.get(f'/api/equipment?customer_id={customer_id}'))['equipment'][0]['id'] == equipment['id']
    assert len(_ok(client.get('/api/equipment?q=souza'))['equipment']) == 1
    _ok(client.delete(f"/api/equipment/{equipment['id']}"))


def test_import_endpoints(client, customer_id):
    data = _ok(client.post('/api/customers/import', json={'records': [{'name': 'Lote', 'phone': '1'}]}))
    assert data['imported'] == 1
    assert [c['name'] for c in _ok(client.get('/api/customers'))['customers']] == ['Lote']

    assert _ok(client.post('/api/products/import', json={'records': []}))['imported'] == 0
    response = client.post('/api/equipment/import', json={'records': 'x'})
    assert response.status_code == 400
    assert response.get_json()['success'] is False


def test_settings_endpoints(client):
    settings = _ok(client.get('/api/settings'))['settings']
    assert settings['default_warranty'] == 90

    _ok(client.put('/api/settings/business', json={'name': 'Conserta Já'}))
    _ok(client.put('/api/settings/checklist', json={'items': ['Liga']}))
    _ok(client.put('/api/settings/terms/exit', json={'text': 'GARANTIA DE 30 DIAS.'}))
    _ok(client.put('/api/settings/warranty', json={'days': 30}))
    _ok(client.put('/api/settings/whatsapp', json={'template': 'Oi {cliente}'}))
    assert client.put('/api/settings/terms/outro', json={'text': 'x'}).status_code == 400

    settings = _ok(client.get('/api/settings'))['settings']
    assert settings['business_info']['name'] == 'Conserta Já'
    assert settings['checklist'] == ['Liga']
    assert settings['terms']['exit'] == 'GARANTIA DE 30 DIAS.'
    assert settings['default_warranty'] == 30
    assert settings['whatsapp_template'] == 'Oi {cliente}'


def test_cloud_and_sync_endpoints(client, cloud_url):
    assert _ok(client.get('/api/sync/status'))['mode'] == 'local'
    assert client.post('/api/settings/cloud/init').status_code == 400

    tested = client.post('/api/settings/cloud/test', json={'url': cloud_url}).get_json()
    assert tested['success'] is True

    connection = _ok(client.put('/api/settings/connection', json={'mode': 'cloud', 'url': cloud_url}))
    assert connection['connection'] == {'mode': 'cloud', 'url_configured': True}
    assert _ok(client.post('/api/settings/cloud/init'))['message'] == 'Banco sincronizado!'

    _ok(client.post('/api/customers', json={'name': 'Nuvem', 'phone': '1'}))
    status = _ok(client.get('/api/sync/status'))
    assert status['cloud_enabled'] and status['pending'] == 0
    assert _ok(client.post('/api/sync/replay'))['applied'] == 0
    assert _ok(client.post('/api/sync/push'))['pushed']['customers'] == 1


def test_backup_endpoints(client):
    created = client.post('/api/backups', json={'force': True})
    assert created.status_code == 200
    assert created.get_json()['success'] is True
    status = _ok(client.get('/api/backups'))
    assert status['total_backups'] == 1 and status['today_exists']


def test_requests_are_profiled(client, settings):
    _ok(client.get('/api/dashboard'))
    log_path = os.path.join(settings.FIXOS_LOG_DIR, PERFORMANCE_LOG)
    with open(log_path, encoding='utf-8') as f:
        content = f.read()
    assert 'Ver painel' in content
    assert 'GET /api/dashboard' in content


def test_app_uses_configured_container(app, settings):
    assert get_container().settings.FIXOS_DATA_DIR == settings.FIXOS_DATA_DIR
    assert 'route_profiler' in app.extensions
