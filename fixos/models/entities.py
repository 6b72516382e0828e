# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio de la asistencia técnica.
# Diseñadas para ser independientes del mecanismo de persistencia:
# el mismo to_dict() se guarda en JSON local y se espeja en la nube.
# ==============================================================================

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def generate_id() -> str:
    """Genera un identificador aleatorio corto (9 caracteres)."""
    return uuid.uuid4().hex[:9]


def now_iso() -> str:
    """Timestamp ISO en UTC."""
    return datetime.now(timezone.utc).isoformat()


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value) if value is not None and value != '' else default
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value)) if value is not None and value != '' else default
    except (TypeError, ValueError):
        return default


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class OrderStatus(str, Enum):
    """Estados de una orden de servicio (valores persistidos)."""
    ENTRY = 'Aguardando Análise'
    BUDGET = 'Em Orçamento'
    APPROVED = 'Aprovado'
    IN_REPAIR = 'Em Reparo'
    FINISHED = 'Finalizado'
    DELIVERED = 'Entregue'
    CANCELLED = 'Cancelado'
    WARRANTY = 'Garantia/Retorno'


class PaymentStatus(str, Enum):
    """Estado de pago de una orden."""
    PENDING = 'Pendente'
    PARTIAL = 'Parcial'
    PAID = 'Pago'


class AccountType(str, Enum):
    """Tipo de cuenta financiera."""
    PAYABLE = 'PAGAR'
    RECEIVABLE = 'RECEBER'


class AccountStatus(str, Enum):
    """Estado de una cuenta financiera."""
    PENDING = 'PENDENTE'
    PAID = 'PAGO'


class OccurrenceType(str, Enum):
    """Tipos de ocurrencia en el log de una orden."""
    INFO = 'Informação'
    ALERT = 'Alerta'
    PROBLEM = 'Problema'


class Priority(str, Enum):
    """Prioridad de atención de una orden."""
    LOW = 'Baixa'
    MEDIUM = 'Média'
    HIGH = 'Alta'
    URGENT = 'Urgente'


# Métodos de pago aceptados en caja
PAYMENT_METHODS = ('Dinheiro', 'Cartão', 'Pix')
DEFAULT_PAYMENT_METHOD = 'Dinheiro'

# Categoría de productos que no manejan stock (mano de obra, servicios)
SERVICES_CATEGORY = 'Serviços'


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ==============================================================================
# CLIENTES, PROVEEDORES Y EQUIPOS
# ==============================================================================

@dataclass
class Customer:
    """
    Cliente de la asistencia.

    Attributes:
        id: Identificador aleatorio
        name: Nombre completo
        phone: Teléfono / WhatsApp
        email: Correo electrónico
        document: CPF/CNPJ
        zip_code: CEP (opcional, usado para autocompletar dirección)
        address: Dirección completa
    """
    id: str
    name: str
    phone: str = ''
    email: str = ''
    document: str = ''
    zip_code: Optional[str] = None
    address: str = ''

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'document': self.document,
            'zip_code': self.zip_code,
            'address': self.address,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Customer':
        """Crea instancia desde diccionario."""
        return cls(
            id=data.get('id', ''),
            name=data.get('name') or '',
            phone=data.get('phone') or '',
            email=data.get('email') or '',
            document=data.get('document') or '',
            zip_code=data.get('zip_code'),
            address=data.get('address') or '',
        )


@dataclass
class Supplier:
    """Proveedor de piezas."""
    id: str
    name: str
    contact: str = ''
    phone: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'contact': self.contact,
            'phone': self.phone,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Supplier':
        return cls(
            id=data.get('id', ''),
            name=data.get('name') or '',
            contact=data.get('contact') or '',
            phone=data.get('phone') or '',
        )


@dataclass
class Equipment:
    """
    Equipo de un cliente (celular, notebook, etc.).
    customer_id es una referencia sin integridad: borrar el cliente
    no borra sus equipos.
    """
    id: str
    customer_id: str
    type: str = 'Smartphone'
    brand: str = ''
    model: str = ''
    serial_number: str = ''

    @property
    def label(self) -> str:
        """Texto corto 'Marca Modelo'."""
        return f"{self.brand} {self.model}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'type': self.type,
            'brand': self.brand,
            'model': self.model,
            'serial_number': self.serial_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Equipment':
        return cls(
            id=data.get('id', ''),
            customer_id=data.get('customer_id') or '',
            type=data.get('type') or 'Smartphone',
            brand=data.get('brand') or '',
            model=data.get('model') or '',
            serial_number=data.get('serial_number') or '',
        )


# ==============================================================================
# INVENTARIO
# ==============================================================================

@dataclass
class Product:
    """
    Producto o servicio del catálogo.

    Attributes:
        id: Identificador aleatorio
        name: Nombre del producto
        sku: Código interno
        price: Precio de venta
        cost: Costo de compra
        stock: Cantidad en inventario (sin control de negativos)
        category: Categoría ('Peças', 'Acessórios', 'Serviços', ...)
    """
    id: str
    name: str
    sku: str = ''
    price: float = 0.0
    cost: float = 0.0
    stock: int = 0
    category: str = 'Peças'

    @property
    def is_service(self) -> bool:
        """Los servicios no se venden en caja ni controlan stock."""
        return self.category == SERVICES_CATEGORY

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'sku': self.sku,
            'price': self.price,
            'cost': self.cost,
            'stock': self.stock,
            'category': self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        return cls(
            id=data.get('id', ''),
            name=data.get('name') or '',
            sku=data.get('sku') or '',
            price=_to_float(data.get('price')),
            cost=_to_float(data.get('cost')),
            stock=_to_int(data.get('stock')),
            category=data.get('category') or 'Peças',
        )


# ==============================================================================
# VENTAS Y ÓRDENES - Ítems compartidos
# ==============================================================================

@dataclass
class LineItem:
    """
    Ítem vendido o usado en una orden.
    Guarda precio y costo del momento para no depender del catálogo.
    """
    product_id: str
    quantity: int = 1
    price_at_time: float = 0.0
    cost_at_time: float = 0.0

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.price_at_time, 2)

    @property
    def line_cost(self) -> float:
        return round(self.quantity * self.cost_at_time, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'quantity': self.quantity,
            'price_at_time': self.price_at_time,
            'cost_at_time': self.cost_at_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        return cls(
            product_id=data.get('product_id') or '',
            quantity=_to_int(data.get('quantity'), 1),
            price_at_time=_to_float(data.get('price_at_time')),
            cost_at_time=_to_float(data.get('cost_at_time')),
        )


def items_total(items: List[LineItem]) -> float:
    """Suma de quantity * price_at_time."""
    return round(sum(i.quantity * i.price_at_time for i in items), 2)


def items_cost(items: List[LineItem]) -> float:
    """Suma de quantity * cost_at_time."""
    return round(sum(i.quantity * i.cost_at_time for i in items), 2)


@dataclass
class Sale:
    """
    Venta directa de mostrador.

    Attributes:
        id: Identificador aleatorio
        customer_id: Cliente (opcional, venta anónima si es None)
        items: Ítems vendidos
        total: Total cobrado
        total_cost: Costo total de los ítems
        payment_method: Dinheiro, Cartão o Pix
        created_at: Fecha de la venta (ISO)
    """
    id: str
    customer_id: Optional[str] = None
    items: List[LineItem] = field(default_factory=list)
    total: float = 0.0
    total_cost: float = 0.0
    payment_method: str = DEFAULT_PAYMENT_METHOD
    created_at: str = ''

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()

    def calculate_totals(self) -> None:
        """Recalcula total y costo a partir de los ítems."""
        self.total = items_total(self.items)
        self.total_cost = items_cost(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'items': [i.to_dict() for i in self.items],
            'total': self.total,
            'total_cost': self.total_cost,
            'payment_method': self.payment_method,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        return cls(
            id=data.get('id', ''),
            customer_id=data.get('customer_id') or None,
            items=[LineItem.from_dict(i) for i in data.get('items') or []],
            total=_to_float(data.get('total')),
            total_cost=_to_float(data.get('total_cost')),
            payment_method=data.get('payment_method') or DEFAULT_PAYMENT_METHOD,
            created_at=data.get('created_at') or '',
        )


@dataclass
class Occurrence:
    """Anotación libre en el log de una orden."""
    id: str
    description: str
    timestamp: str = ''
    type: str = OccurrenceType.INFO.value

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = now_iso()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'description': self.description,
            'timestamp': self.timestamp,
            'type': _enum_value(self.type),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Occurrence':
        return cls(
            id=data.get('id') or generate_id(),
            description=data.get('description') or '',
            timestamp=data.get('timestamp') or '',
            type=data.get('type') or OccurrenceType.INFO.value,
        )


@dataclass
class StatusChange:
    """Entrada del historial de estados de una orden."""
    status: str
    timestamp: str = ''
    note: Optional[str] = None

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = now_iso()

    def to_dict(self) -> Dict[str, Any]:
        d = {'status': _enum_value(self.status), 'timestamp': self.timestamp}
        if self.note:
            d['note'] = self.note
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StatusChange':
        return cls(
            status=data.get('status') or OrderStatus.ENTRY.value,
            timestamp=data.get('timestamp') or '',
            note=data.get('note'),
        )


# ==============================================================================
# ORDEN DE SERVICIO
# ==============================================================================

@dataclass
class ServiceOrder:
    """
    Orden de servicio: sigue un equipo desde la entrada hasta la entrega.

    Las colecciones (ítems, checklist, historial, ocurrencias y fotos)
    van embebidas en el registro, no normalizadas en otras tablas.

    Attributes:
        id: Identificador aleatorio
        order_number: Número visible (secuencial, desde 1001)
        customer_id: Cliente dueño del equipo
        equipment_id: Equipo en reparación
        status: Estado actual (OrderStatus)
        payment_status: Estado de pago (PaymentStatus)
        checklist: {item de inspección: pasa/no pasa}
        photos: Imágenes embebidas en base64
        items: Piezas usadas
        labor_cost: Mano de obra cobrada
        labor_cost_base: Costo de ejecución (comisión del técnico)
        diagnosis_fee: Tasa de diagnóstico
        total: items + labor_cost + diagnosis_fee
        total_cost: costo de ítems + labor_cost_base
        history: Historial de cambios de estado
        occurrences: Log de ocurrencias
    """
    id: str
    customer_id: str
    equipment_id: str
    order_number: int = 0
    status: str = OrderStatus.ENTRY.value
    payment_status: str = PaymentStatus.PENDING.value
    payment_method: Optional[str] = None
    problem_description: str = ''
    technical_report: str = ''
    accessories: str = ''
    checklist: Dict[str, bool] = field(default_factory=dict)
    checklist_observations: Optional[str] = None
    photos: List[str] = field(default_factory=list)
    items: List[LineItem] = field(default_factory=list)
    labor_cost: float = 0.0
    labor_cost_base: float = 0.0
    diagnosis_fee: float = 0.0
    total: float = 0.0
    total_cost: float = 0.0
    warranty_days: int = 90
    warranty_expiry_date: Optional[str] = None
    created_at: str = ''
    updated_at: str = ''
    technician: Optional[str] = None
    priority: Optional[str] = None
    history: List[StatusChange] = field(default_factory=list)
    occurrences: List[Occurrence] = field(default_factory=list)

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def is_closed(self) -> bool:
        """Finalizada o entregada (cuenta como ingreso)."""
        return self.status in (OrderStatus.FINISHED.value, OrderStatus.DELIVERED.value)

    def calculate_total(self) -> float:
        """Total = ítems + mano de obra + tasa de diagnóstico."""
        return round(items_total(self.items) + self.labor_cost + self.diagnosis_fee, 2)

    def calculate_total_cost(self) -> float:
        return round(items_cost(self.items) + self.labor_cost_base, 2)

    def calculate_totals(self) -> None:
        """Recalcula total y total_cost en la instancia."""
        self.total = self.calculate_total()
        self.total_cost = self.calculate_total_cost()

    def add_history(self, status: str, note: Optional[str] = None) -> StatusChange:
        entry = StatusChange(status=_enum_value(status), note=note)
        self.history.append(entry)
        return entry

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        return {
            'id': self.id,
            'order_number': self.order_number,
            'customer_id': self.customer_id,
            'equipment_id': self.equipment_id,
            'status': _enum_value(self.status),
            'payment_status': _enum_value(self.payment_status),
            'payment_method': self.payment_method,
            'problem_description': self.problem_description,
            'technical_report': self.technical_report,
            'accessories': self.accessories,
            'checklist': dict(self.checklist),
            'checklist_observations': self.checklist_observations,
            'photos': list(self.photos),
            'items': [i.to_dict() for i in self.items],
            'labor_cost': self.labor_cost,
            'labor_cost_base': self.labor_cost_base,
            'diagnosis_fee': self.diagnosis_fee,
            'total': self.total,
            'total_cost': self.total_cost,
            'warranty_days': self.warranty_days,
            'warranty_expiry_date': self.warranty_expiry_date,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'technician': self.technician,
            'priority': _enum_value(self.priority),
            'history': [h.to_dict() for h in self.history],
            'occurrences': [o.to_dict() for o in self.occurrences],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ServiceOrder':
        """Crea instancia desde diccionario (local o fila de la nube)."""
        checklist = data.get('checklist') or {}
        return cls(
            id=data.get('id', ''),
            order_number=_to_int(data.get('order_number')),
            customer_id=data.get('customer_id') or '',
            equipment_id=data.get('equipment_id') or '',
            status=data.get('status') or OrderStatus.ENTRY.value,
            payment_status=data.get('payment_status') or PaymentStatus.PENDING.value,
            payment_method=data.get('payment_method'),
            problem_description=data.get('problem_description') or '',
            technical_report=data.get('technical_report') or '',
            accessories=data.get('accessories') or '',
            checklist={str(k): bool(v) for k, v in checklist.items()},
            checklist_observations=data.get('checklist_observations'),
            photos=list(data.get('photos') or []),
            items=[LineItem.from_dict(i) for i in data.get('items') or []],
            labor_cost=_to_float(data.get('labor_cost')),
            labor_cost_base=_to_float(data.get('labor_cost_base')),
            diagnosis_fee=_to_float(data.get('diagnosis_fee')),
            total=_to_float(data.get('total')),
            total_cost=_to_float(data.get('total_cost')),
            warranty_days=_to_int(data.get('warranty_days'), 90),
            warranty_expiry_date=data.get('warranty_expiry_date'),
            created_at=data.get('created_at') or '',
            updated_at=data.get('updated_at') or '',
            technician=data.get('technician'),
            priority=data.get('priority'),
            history=[StatusChange.from_dict(h) for h in data.get('history') or []],
            occurrences=[Occurrence.from_dict(o) for o in data.get('occurrences') or []],
        )


# ==============================================================================
# FINANZAS
# ==============================================================================

@dataclass
class FinancialAccount:
    """
    Cuenta a pagar o a cobrar.

    Attributes:
        related_id: ID de la orden o venta relacionada (opcional)
    """
    id: str
    description: str
    amount: float
    due_date: str
    type: str = AccountType.PAYABLE.value
    status: str = AccountStatus.PENDING.value
    category: str = 'Geral'
    created_at: str = ''
    related_id: Optional[str] = None

    def __post_init__(self):
        if not self.created_at:
            self.created_at = now_iso()

    @property
    def is_pending(self) -> bool:
        return self.status == AccountStatus.PENDING.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'description': self.description,
            'amount': self.amount,
            'due_date': self.due_date,
            'type': _enum_value(self.type),
            'status': _enum_value(self.status),
            'category': self.category,
            'created_at': self.created_at,
            'related_id': self.related_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinancialAccount':
        return cls(
            id=data.get('id', ''),
            description=data.get('description') or '',
            amount=_to_float(data.get('amount')),
            due_date=data.get('due_date') or '',
            type=data.get('type') or AccountType.PAYABLE.value,
            status=data.get('status') or AccountStatus.PENDING.value,
            category=data.get('category') or 'Geral',
            created_at=data.get('created_at') or '',
            related_id=data.get('related_id'),
        )


# ==============================================================================
# CONFIGURACIÓN DEL NEGOCIO
# ==============================================================================

@dataclass
class BusinessInfo:
    """Datos del negocio impresos en el encabezado de las órdenes."""
    name: str
    cnpj: str = ''
    phone: str = ''
    address: str = ''
    logo_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            'name': self.name,
            'cnpj': self.cnpj,
            'phone': self.phone,
            'address': self.address,
        }
        if self.logo_url:
            d['logo_url'] = self.logo_url
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BusinessInfo':
        return cls(
            name=data.get('name') or '',
            cnpj=data.get('cnpj') or '',
            phone=data.get('phone') or '',
            address=data.get('address') or '',
            logo_url=data.get('logo_url'),
        )
