# ==============================================================================
# ESQUEMA DEL ESPEJO EN LA NUBE (SQLAlchemy Core)
# ==============================================================================
# Columnas en snake_case, con los mismos nombres que las claves de
# to_dict() de cada entidad. Los campos anidados van en columnas JSON.
# ==============================================================================

from sqlalchemy import JSON, Column, Integer, MetaData, Numeric, String, Table, Text

metadata = MetaData()


def _money(name: str) -> Column:
    return Column(name, Numeric(12, 2, asdecimal=False), default=0)


customers = Table(
    "customers",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("name", Text, nullable=False),
    Column("phone", Text),
    Column("email", Text),
    Column("document", Text),
    Column("zip_code", Text),
    Column("address", Text),
)

suppliers = Table(
    "suppliers",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("name", Text, nullable=False),
    Column("contact", Text),
    Column("phone", Text),
)

products = Table(
    "products",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("name", Text, nullable=False),
    Column("sku", Text),
    _money("price"),
    _money("cost"),
    Column("stock", Integer, default=0),
    Column("category", Text),
)

equipment = Table(
    "equipment",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("customer_id", String(32)),
    Column("type", Text),
    Column("brand", Text),
    Column("model", Text),
    Column("serial_number", Text),
)

orders = Table(
    "orders",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("order_number", Integer),
    Column("customer_id", String(32)),
    Column("equipment_id", String(32)),
    Column("status", Text),
    Column("payment_status", Text),
    Column("payment_method", Text),
    Column("problem_description", Text),
    Column("technical_report", Text),
    Column("accessories", Text),
    Column("checklist", JSON),
    Column("checklist_observations", Text),
    Column("photos", JSON),
    Column("items", JSON),
    _money("labor_cost"),
    _money("labor_cost_base"),
    _money("diagnosis_fee"),
    _money("total"),
    _money("total_cost"),
    Column("warranty_days", Integer),
    Column("warranty_expiry_date", String(40)),
    Column("created_at", String(40)),
    Column("updated_at", String(40)),
    Column("technician", Text),
    Column("priority", Text),
    Column("history", JSON),
    Column("occurrences", JSON),
)

sales = Table(
    "sales",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("customer_id", String(32)),
    Column("items", JSON),
    _money("total"),
    _money("total_cost"),
    Column("payment_method", Text),
    Column("created_at", String(40)),
)

financial_accounts = Table(
    "financial_accounts",
    metadata,
    Column("id", String(32), primary_key=True),
    Column("description", Text, nullable=False),
    _money("amount"),
    Column("due_date", String(40)),
    Column("type", Text),
    Column("status", Text),
    Column("category", Text),
    Column("created_at", String(40)),
    Column("related_id", String(32)),
)

settings = Table(
    "settings",
    metadata,
    Column("key", String(64), primary_key=True),
    Column("value", JSON),
)


# Nombre de tabla local -> tabla en la nube
LOCAL_TO_CLOUD = {
    'customers': 'customers',
    'products': 'products',
    'suppliers': 'suppliers',
    'equipment': 'equipment',
    'orders': 'orders',
    'sales': 'sales',
    'financialAccounts': 'financial_accounts',
    'settings': 'settings',
}
