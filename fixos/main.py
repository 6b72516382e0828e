# ==============================================================================
# APLICACIÓN WEB - API JSON de FixOS
# ==============================================================================
# Cada grupo de rutas corresponde a una pantalla del sistema:
# panel, O.S., financiero, cuentas, clientes, inventario, proveedores,
# equipos, ventas, ajustes, sincronización y backups.
#
# Respuestas: {"success": true, ...} o {"success": false, "error": "..."}
# ==============================================================================

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, Response, request
from werkzeug.exceptions import HTTPException

from fixos.app_container import AppContainer, get_container
from fixos.config import Settings
from fixos.errors import FixosError, ValidationError
from fixos.repositories.cloud_mirror import INITIALIZED_MSG
from fixos.performance_logger import init_profiling
from fixos.services.account_service import FILTER_ALL

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

api = Blueprint('api', __name__, url_prefix='/api')


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Dados não recebidos ou formato inválido.')
    return data


def _dicts(items) -> list:
    return [i.to_dict() for i in items]


# ═══════════════════════════════════════════════════════════════════════════
# PANEL Y FINANCIERO
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/dashboard', methods=['GET'])
def dashboard():
    return {'success': True, 'stats': get_container().stats_service.dashboard()}


@api.route('/dashboard/insights', methods=['GET'])
def dashboard_insights():
    container = get_container()
    stats = container.stats_service.dashboard()
    return {'success': True, 'insights': container.assistant_service.get_business_insights(stats)}


@api.route('/finance', methods=['GET'])
def finance():
    report = get_container().stats_service.financial_report(request.args.get('month'))
    return {'success': True, **report}


# ═══════════════════════════════════════════════════════════════════════════
# ÓRDENES DE SERVICIO
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/orders', methods=['GET'])
def list_orders():
    orders = get_container().order_service.search(request.args.get('q'))
    return {'success': True, 'orders': _dicts(orders)}


@api.route('/orders', methods=['POST'])
def save_order():
    """
    Body: {"order": {...}, "closing": false, "new_equipment": {...} | null}
    """
    data = _json_body()
    order = get_container().order_service.save_order(
        data.get('order') or {},
        closing=bool(data.get('closing')),
        new_equipment=data.get('new_equipment'),
    )
    return {'success': True, 'order': order.to_dict()}


@api.route('/orders/<order_id>', methods=['GET'])
def get_order(order_id):
    return {'success': True, 'order': get_container().order_service.get_order(order_id).to_dict()}


@api.route('/orders/<order_id>', methods=['DELETE'])
def delete_order(order_id):
    get_container().order_service.delete_order(order_id)
    return {'success': True}


@api.route('/orders/<order_id>/status', methods=['POST'])
def change_order_status(order_id):
    data = _json_body()
    order = get_container().order_service.change_status(order_id, data.get('status'), data.get('note'))
    return {'success': True, 'order': order.to_dict()}


@api.route('/orders/<order_id>/occurrences', methods=['POST'])
def add_occurrence(order_id):
    data = _json_body()
    occurrence = get_container().order_service.add_occurrence(
        order_id, data.get('description'), data.get('type') or 'Informação')
    return {'success': True, 'occurrence': occurrence.to_dict()}, 201


@api.route('/orders/<order_id>/print', methods=['GET'])
def print_order(order_id):
    auto_print = request.args.get('auto_print', '1') != '0'
    html = get_container().print_service.render_order(order_id, auto_print=auto_print)
    return Response(html, mimetype='text/html')


@api.route('/orders/<order_id>/notify', methods=['GET'])
def notify_order(order_id):
    link = get_container().notification_service.order_status_link(order_id)
    return {'success': True, **link}


@api.route('/orders/technical-report', methods=['POST'])
def technical_report():
    problem = (_json_body().get('problem_description') or '').strip()
    if not problem:
        raise ValidationError('Descreva o problema primeiro.')
    return {'success': True, 'report': get_container().assistant_service.generate_technical_report(problem)}


@api.route('/orders/quick-customer', methods=['POST'])
def quick_add_customer():
    data = _json_body()
    customer = get_container().order_service.quick_add_customer(
        data.get('name'), data.get('phone'), data.get('document') or '')
    return {'success': True, 'customer': customer.to_dict()}, 201


# ═══════════════════════════════════════════════════════════════════════════
# CUENTAS A PAGAR / COBRAR
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/accounts', methods=['GET'])
def list_accounts():
    service = get_container().account_service
    accounts = service.list_accounts(request.args.get('type', FILTER_ALL),
                                     request.args.get('status', FILTER_ALL))
    return {'success': True, 'accounts': _dicts(accounts), 'summary': service.summary(accounts)}


@api.route('/accounts', methods=['POST'])
def save_account():
    account = get_container().account_service.save_account(_json_body())
    return {'success': True, 'account': account.to_dict()}


@api.route('/accounts/<account_id>', methods=['DELETE'])
def delete_account(account_id):
    get_container().account_service.delete_account(account_id)
    return {'success': True}


@api.route('/accounts/<account_id>/toggle', methods=['POST'])
def toggle_account(account_id):
    account = get_container().account_service.toggle_status(account_id)
    return {'success': True, 'account': account.to_dict()}


# ═══════════════════════════════════════════════════════════════════════════
# CLIENTES
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/customers', methods=['GET'])
def list_customers():
    customers = get_container().customer_service.search(request.args.get('q'))
    return {'success': True, 'customers': _dicts(customers)}


@api.route('/customers', methods=['POST'])
def save_customer():
    customer = get_container().customer_service.save_customer(_json_body())
    return {'success': True, 'customer': customer.to_dict()}


@api.route('/customers/import', methods=['POST'])
def import_customers():
    customers = get_container().customer_service.replace_customers(_json_body().get('records'))
    return {'success': True, 'imported': len(customers)}


@api.route('/customers/<customer_id>', methods=['GET'])
def get_customer(customer_id):
    return {'success': True, 'customer': get_container().customer_service.get_customer(customer_id).to_dict()}


@api.route('/customers/<customer_id>', methods=['DELETE'])
def delete_customer(customer_id):
    get_container().customer_service.delete_customer(customer_id)
    return {'success': True}


@api.route('/customers/address/<zip_code>', methods=['GET'])
def lookup_address(zip_code):
    address = get_container().customer_service.lookup_address(zip_code)
    if address is None:
        return {'success': False, 'error': 'CEP não encontrado.'}, 404
    return {'success': True, 'address': address}


# ═══════════════════════════════════════════════════════════════════════════
# INVENTARIO
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/products', methods=['GET'])
def list_products():
    service = get_container().product_service
    term = request.args.get('q')
    products = service.list_for_sale(term) if request.args.get('for_sale') == '1' else service.search(term)
    return {'success': True, 'products': _dicts(products)}


@api.route('/products', methods=['POST'])
def save_product():
    product = get_container().product_service.save_product(_json_body())
    return {'success': True, 'product': product.to_dict()}


@api.route('/products/import', methods=['POST'])
def import_products():
    products = get_container().product_service.replace_products(_json_body().get('records'))
    return {'success': True, 'imported': len(products)}


@api.route('/products/<product_id>', methods=['DELETE'])
def delete_product(product_id):
    get_container().product_service.delete_product(product_id)
    return {'success': True}


@api.route('/products/<product_id>/stock', methods=['POST'])
def adjust_stock(product_id):
    try:
        delta = int(_json_body().get('delta'))
    except (TypeError, ValueError):
        raise ValidationError('Quantidade inválida.')
    product = get_container().product_service.adjust_stock(product_id, delta)
    return {'success': True, 'product': product.to_dict()}


# ═══════════════════════════════════════════════════════════════════════════
# PROVEEDORES Y EQUIPOS
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/suppliers', methods=['GET'])
def list_suppliers():
    suppliers = get_container().supplier_service.search(request.args.get('q'))
    return {'success': True, 'suppliers': _dicts(suppliers)}


@api.route('/suppliers', methods=['POST'])
def save_supplier():
    supplier = get_container().supplier_service.save_supplier(_json_body())
    return {'success': True, 'supplier': supplier.to_dict()}


@api.route('/suppliers/<supplier_id>', methods=['DELETE'])
def delete_supplier(supplier_id):
    get_container().supplier_service.delete_supplier(supplier_id)
    return {'success': True}


@api.route('/equipment', methods=['GET'])
def list_equipment():
    service = get_container().equipment_service
    customer_id = request.args.get('customer_id')
    items = service.list_for_customer(customer_id) if customer_id else service.search(request.args.get('q'))
    return {'success': True, 'equipment': _dicts(items)}


@api.route('/equipment', methods=['POST'])
def save_equipment():
    equipment = get_container().equipment_service.save_equipment(_json_body())
    return {'success': True, 'equipment': equipment.to_dict()}


@api.route('/equipment/import', methods=['POST'])
def import_equipment():
    equipment = get_container().equipment_service.replace_equipment(_json_body().get('records'))
    return {'success': True, 'imported': len(equipment)}


@api.route('/equipment/<equipment_id>', methods=['DELETE'])
def delete_equipment(equipment_id):
    get_container().equipment_service.delete_equipment(equipment_id)
    return {'success': True}


# ═══════════════════════════════════════════════════════════════════════════
# CARRITO Y VENTAS
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/cart', methods=['GET'])
def view_cart():
    return {'success': True, **get_container().cart_service.get_cart()}


@api.route('/cart/items', methods=['POST'])
def add_to_cart():
    data = _json_body()
    cart = get_container().cart_service.add_item(data.get('product_id'), data.get('quantity', 1))
    return {'success': True, **cart}


@api.route('/cart/items/<product_id>', methods=['DELETE'])
def remove_from_cart(product_id):
    return {'success': True, **get_container().cart_service.remove_item(product_id)}


@api.route('/cart/clear', methods=['POST'])
def clear_cart():
    get_container().cart_service.clear()
    return {'success': True}


@api.route('/cart/checkout', methods=['POST'])
def checkout():
    """
    Body opcional: {"customer_id": "...", "payment_method": "Pix"}
    El carrito se vacía solo si la venta se registró.
    """
    container = get_container()
    data = _json_body()
    sale = container.sales_service.finalize_sale(
        container.cart_service.items(),
        customer_id=data.get('customer_id'),
        payment_method=data.get('payment_method') or 'Dinheiro',
    )
    container.cart_service.clear()
    return {'success': True, 'sale': sale.to_dict()}, 201


@api.route('/sales', methods=['GET'])
def list_sales():
    return {'success': True, 'sales': _dicts(get_container().sales_service.list_sales())}


# ═══════════════════════════════════════════════════════════════════════════
# AJUSTES
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/settings', methods=['GET'])
def get_settings():
    return {'success': True, 'settings': get_container().settings_service.get_all()}


@api.route('/settings/business', methods=['PUT'])
def save_business_info():
    info = get_container().settings_service.save_business_info(_json_body())
    return {'success': True, 'business_info': info.to_dict()}


@api.route('/settings/checklist', methods=['PUT'])
def save_checklist():
    items = get_container().settings_service.save_checklist(_json_body().get('items'))
    return {'success': True, 'checklist': items}


@api.route('/settings/terms/<kind>', methods=['PUT'])
def save_terms(kind):
    text = get_container().settings_service.save_terms(kind, _json_body().get('text'))
    return {'success': True, 'terms': text}


@api.route('/settings/warranty', methods=['PUT'])
def save_warranty():
    days = get_container().settings_service.save_default_warranty(_json_body().get('days'))
    return {'success': True, 'default_warranty': days}


@api.route('/settings/whatsapp', methods=['PUT'])
def save_whatsapp_template():
    template = get_container().settings_service.save_whatsapp_template(_json_body().get('template'))
    return {'success': True, 'whatsapp_template': template}


@api.route('/settings/connection', methods=['PUT'])
def save_connection():
    data = _json_body()
    connection = get_container().settings_service.save_connection(data.get('mode'), data.get('url'))
    return {'success': True, 'connection': connection}


@api.route('/settings/cloud/test', methods=['POST'])
def test_cloud():
    ok, message = get_container().settings_service.test_cloud(_json_body().get('url'))
    return {'success': ok, 'message': message}


@api.route('/settings/cloud/init', methods=['POST'])
def init_cloud():
    added = get_container().settings_service.initialize_cloud()
    return {'success': True, 'message': INITIALIZED_MSG, 'added_columns': added}


# ═══════════════════════════════════════════════════════════════════════════
# SINCRONIZACIÓN Y BACKUPS
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/sync/status', methods=['GET'])
def sync_status():
    return {'success': True, **get_container().sync_service.status()}


@api.route('/sync/replay', methods=['POST'])
def sync_replay():
    return {'success': True, **get_container().sync_service.replay_outbox()}


@api.route('/sync/push', methods=['POST'])
def sync_push():
    return {'success': True, **get_container().sync_service.push_local_to_cloud()}


@api.route('/backups', methods=['GET'])
def backup_status():
    return {'success': True, **get_container().backup_service.get_backup_status()}


@api.route('/backups', methods=['POST'])
def create_backup():
    service = get_container().backup_service
    result = service.create_backup(force=bool(_json_body().get('force')))
    result['rotation'] = service.rotate_backups()
    return result, (200 if result['success'] else 500)


# ═══════════════════════════════════════════════════════════════════════════
# MANEJO DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════

def _handle_fixos_error(error: FixosError):
    if error.status_code >= 500:
        logger.error(f"{type(error).__name__}: {error.message}")
    return error.to_dict(), error.status_code


def _handle_http_error(error: HTTPException):
    return {'success': False, 'error': error.description}, error.code


# ═══════════════════════════════════════════════════════════════════════════
# FÁBRICA DE LA APLICACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def create_app(settings: Optional[Settings] = None, testing: bool = False) -> Flask:
    """
    Crea la app Flask.

    Args:
        settings: Configuración (por defecto se lee del entorno / .env)
        testing: Desactiva el backup de arranque
    """
    settings = settings or Settings()
    configure_logging(settings.FIXOS_LOG_LEVEL)

    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.FIXOS_SECRET_KEY
    app.config['TESTING'] = testing
    app.json.ensure_ascii = False

    AppContainer.reset_instance()
    container = get_container(settings)

    init_profiling(app, settings.FIXOS_LOG_DIR)
    app.register_blueprint(api)
    app.register_error_handler(FixosError, _handle_fixos_error)
    app.register_error_handler(HTTPException, _handle_http_error)

    if not testing:
        result = container.backup_service.run_daily_backup()
        if not result['backup']['success']:
            logger.warning(f"Backup de arranque: {result['backup']['message']}")

    mode = container.connection.get_config()['mode']
    logger.info(f"FixOS iniciado (datos: {settings.FIXOS_DATA_DIR}, modo: {mode})")
    return app
