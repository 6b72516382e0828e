# ==============================================================================
# NOTIFICACIONES POR WHATSAPP
# ==============================================================================
# Arma el link wa.me con el mensaje de estado de la O.S.
# Marcadores de la plantilla: {cliente} {os} {equipamento} {status} {empresa}
# ==============================================================================

import re
from typing import Dict
from urllib.parse import quote

from fixos.errors import ValidationError

WA_URL = 'https://wa.me'
COUNTRY_PREFIX = '55'


def normalize_phone(phone: str) -> str:
    """Solo dígitos; números de 10/11 dígitos reciben el prefijo 55."""
    digits = re.sub(r'\D', '', phone or '')
    if not digits:
        raise ValidationError('Telefone do cliente inválido.')
    if len(digits) in (10, 11):
        digits = COUNTRY_PREFIX + digits
    return digits


def render_message(template: str, values: Dict[str, str]) -> str:
    """Reemplaza los marcadores conocidos; el resto del texto queda igual."""
    message = template
    for key, value in values.items():
        message = message.replace('{' + key + '}', str(value))
    return message


def build_whatsapp_link(phone: str, message: str) -> str:
    """
    Link wa.me con el mensaje codificado.

    Raises:
        ValidationError: teléfono sin dígitos
    """
    return f"{WA_URL}/{normalize_phone(phone)}?text={quote(message)}"


class NotificationService:
    """Avisos al cliente por WhatsApp (link wa.me con mensaje armado)."""

    def __init__(self, order_service, settings_service):
        self.order_service = order_service
        self.settings_service = settings_service

    def order_status_link(self, order_id: str) -> Dict[str, str]:
        """
        Link de WhatsApp para avisar al cliente el estado de la O.S.

        Raises:
            ValidationError: cliente sin teléfono
        """
        ctx = self.order_service.get_order_context(order_id)
        order, customer, equipment = ctx['order'], ctx['customer'], ctx['equipment']
        if customer is None:
            raise ValidationError('O.S. sem cliente cadastrado.')

        message = render_message(self.settings_service.get_whatsapp_template(), {
            'cliente': customer.name,
            'os': order.order_number,
            'equipamento': equipment.label if equipment else '',
            'status': order.status,
            'empresa': self.settings_service.get_business_info().name,
        })
        return {'url': build_whatsapp_link(customer.phone, message), 'message': message}
