# ==============================================================================
# SERVICIO DE IMPRESIÓN DE O.S.
# ==============================================================================
# Genera el documento HTML de una orden (plantilla Jinja2).
# Los términos impresos dependen del estado:
# - Em Orçamento            → términos de presupuesto
# - Finalizado / Entregue   → términos de salida / garantía
# - cualquier otro          → términos de entrada
# ==============================================================================

import os
from datetime import datetime
from typing import Any, Dict, List, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from fixos.models import OrderStatus, ServiceOrder

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'templates')


def format_money(value: Any) -> str:
    """1234.5 -> '1.234,50' (formato brasileño)."""
    text = f"{float(value or 0):,.2f}"
    return text.replace(',', '_').replace('.', ',').replace('_', '.')


def terms_kind_for(status: str) -> Tuple[str, str]:
    """(tipo de término, título) según el estado de la orden."""
    if status == OrderStatus.BUDGET.value:
        return 'budget', 'TERMOS DE ORÇAMENTO:'
    if status in (OrderStatus.FINISHED.value, OrderStatus.DELIVERED.value):
        return 'exit', 'TERMOS DE SAÍDA / GARANTIA:'
    return 'entry', 'TERMOS DE ENTRADA:'


def build_lines(order: ServiceOrder, product_names: Dict[str, str]) -> List[Dict[str, Any]]:
    """Mano de obra y tasa (solo si > 0) seguidas de los ítems."""
    lines = []
    if order.labor_cost > 0:
        lines.append({'description': 'MÃO DE OBRA', 'unit': order.labor_cost, 'total': order.labor_cost})
    if order.diagnosis_fee > 0:
        lines.append({'description': 'TAXA DE DIAGNÓSTICO', 'unit': order.diagnosis_fee,
                      'total': order.diagnosis_fee})
    for item in order.items:
        lines.append({
            'description': product_names.get(item.product_id, 'Item'),
            'unit': item.price_at_time,
            'total': item.line_total,
        })
    return lines


class PrintService:
    """Comprobante HTML de la O.S. (templates/order_print.html)."""

    def __init__(self, order_service, settings_service):
        self.order_service = order_service
        self.settings_service = settings_service
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=select_autoescape(['html']),
        )
        self.env.filters['money'] = format_money

    def render_order(self, order_id: str, auto_print: bool = True) -> str:
        """HTML listo para imprimir de la O.S."""
        ctx = self.order_service.get_order_context(order_id)
        order = ctx['order']
        kind, title = terms_kind_for(order.status)
        try:
            created_at = datetime.fromisoformat(order.created_at.replace('Z', '+00:00')).strftime('%d/%m/%Y %H:%M')
        except ValueError:
            created_at = order.created_at

        template = self.env.get_template('order_print.html')
        return template.render(
            order=order,
            customer=ctx['customer'],
            equipment=ctx['equipment'],
            business=self.settings_service.get_business_info(),
            lines=build_lines(order, ctx['product_names']),
            terms=self.settings_service.get_terms(kind),
            terms_title=title,
            created_at=created_at,
            auto_print=auto_print,
        )
