# ==============================================================================
# SERVICIO DE ESTADÍSTICAS
# ==============================================================================
# Panel principal y reporte financiero mensual.
#
# REPORTE MENSUAL:
# - O.S. Finalizado/Entregue cuentan como ingreso (fecha = updated_at)
# - Ventas directas siempre cuentan (fecha = created_at)
# ==============================================================================

import re
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fixos.errors import ValidationError
from fixos.models import DEFAULT_PAYMENT_METHOD, PAYMENT_METHODS, OrderStatus
from fixos.repositories.interfaces import IEntityRepository

TYPE_ORDER = 'OS'
TYPE_SALE = 'VENDA'

MONTH_RE = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')


class StatsService:
    """
    Cálculo de estadísticas.

    Responsabilidades:
    - Totales del panel (ingresos, conteo por estado)
    - Transacciones del mes agrupadas por tipo y forma de pago
    """

    def __init__(self, order_repo: IEntityRepository, sales_repo: IEntityRepository,
                 customer_repo: IEntityRepository):
        self.order_repo = order_repo
        self.sales_repo = sales_repo
        self.customer_repo = customer_repo

    def dashboard(self) -> Dict[str, Any]:
        """
        Métricas del panel principal.

        Returns:
            Dict con ingresos, O.S. por estado y totales por entidad
        """
        orders = self.order_repo.list_all()
        sales = self.sales_repo.list_all()

        os_revenue = round(sum(o.total for o in orders), 2)
        sales_revenue = round(sum(s.total for s in sales), 2)
        status_counts = {s.value: 0 for s in OrderStatus}
        for order in orders:
            status_counts[order.status] = status_counts.get(order.status, 0) + 1

        return {
            'os_revenue': os_revenue,
            'sales_revenue': sales_revenue,
            'total_revenue': round(os_revenue + sales_revenue, 2),
            'status_counts': status_counts,
            'total_customers': len(self.customer_repo.list_all()),
            'total_orders': len(orders),
            'total_sales': len(sales),
        }

    def transactions(self) -> List[Dict[str, Any]]:
        """Todas las transacciones (O.S. cerradas + ventas), más nuevas primero."""
        rows = []
        for order in self.order_repo.list_all():
            if not order.is_closed:
                continue
            rows.append({
                'id': order.id,
                'type': TYPE_ORDER,
                'description': f"O.S. #{order.order_number}",
                'amount': order.total,
                'date': order.updated_at,
                'method': order.payment_method or DEFAULT_PAYMENT_METHOD,
            })
        for sale in self.sales_repo.list_all():
            rows.append({
                'id': sale.id,
                'type': TYPE_SALE,
                'description': 'Venda Direta',
                'amount': sale.total,
                'date': sale.created_at,
                'method': sale.payment_method,
            })
        rows.sort(key=lambda t: t['date'] or '', reverse=True)
        return rows

    def financial_report(self, month: Optional[str] = None) -> Dict[str, Any]:
        """
        Reporte del mes.

        Args:
            month: 'YYYY-MM' (por defecto el mes actual)

        Returns:
            Dict con transacciones, totales por tipo y por forma de pago
            (solo formas con valor > 0)
        """
        month = month or datetime.now(timezone.utc).strftime('%Y-%m')
        if not MONTH_RE.match(month):
            raise ValidationError('Mês inválido (use AAAA-MM).')

        filtered = [t for t in self.transactions() if (t['date'] or '').startswith(month)]

        by_type = defaultdict(float)
        by_method = defaultdict(float)
        for t in filtered:
            by_type[t['type']] += t['amount']
            by_method[t['method']] += t['amount']

        methods = [
            {'name': name, 'value': round(by_method[name], 2)}
            for name in PAYMENT_METHODS if by_method.get(name, 0) > 0
        ]

        return {
            'month': month,
            'transactions': filtered,
            'total_revenue': round(sum(t['amount'] for t in filtered), 2),
            'os_revenue': round(by_type[TYPE_ORDER], 2),
            'sales_revenue': round(by_type[TYPE_SALE], 2),
            'by_method': methods,
        }
