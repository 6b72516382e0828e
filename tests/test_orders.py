# -*- coding: utf-8 -*-
"""
Tests del ciclo de vida de las órdenes de servicio
"""
from datetime import datetime, timedelta

import pytest

from fixos.errors import NotFoundError, ValidationError
from fixos.models import OrderStatus, PaymentStatus
from fixos.services.order_service import SAVE_NOTE


def _days_between(start: str, end: str) -> timedelta:
    return datetime.fromisoformat(end) - datetime.fromisoformat(start)


def test_first_order_is_1001_and_numbers_increase(container, customer, equipment):
    service = container.order_service
    first = service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id})
    second = service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id})
    assert first.order_number == 1001
    assert second.order_number == 1002
    assert [o.order_number for o in service.list_orders()] == [1002, 1001]


def test_new_order_defaults(container, customer, equipment):
    order = container.order_service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id})
    assert order.status == OrderStatus.ENTRY.value
    assert order.payment_status == PaymentStatus.PENDING.value
    assert order.warranty_days == 90
    assert order.history[-1].status == OrderStatus.ENTRY.value
    assert order.history[-1].note == SAVE_NOTE
    assert order.warranty_expiry_date is None


def test_total_from_items_labor_and_fee(container, customer, equipment):
    part = container.product_service.save_product({'name': 'Conector', 'price': 50, 'cost': 20, 'stock': 5})
    order = container.order_service.save_order({
        'customer_id': customer.id,
        'equipment_id': equipment.id,
        'items': [{'product_id': part.id, 'quantity': 1}],
        'labor_cost': 20,
        'diagnosis_fee': 30,
        'labor_cost_base': 5,
    })
    assert order.items[0].price_at_time == 50.0
    assert order.items[0].cost_at_time == 20.0
    assert order.total == 100.00
    assert order.total_cost == 25.00
    # Guardar la O.S. no descuenta stock
    assert container.product_service.get_product(part.id).stock == 5


def test_item_prices_sent_by_client_are_kept(container, customer, equipment):
    order = container.order_service.save_order({
        'customer_id': customer.id,
        'equipment_id': equipment.id,
        'items': [{'product_id': 'sem-cadastro', 'quantity': 2, 'price_at_time': 15, 'cost_at_time': 5}],
    })
    assert order.total == 30.0
    assert order.total_cost == 10.0


def test_customer_and_equipment_required(container, customer):
    with pytest.raises(ValidationError):
        container.order_service.save_order({'equipment_id': 'e1'})
    with pytest.raises(ValidationError):
        container.order_service.save_order({'customer_id': customer.id})


def test_new_equipment_is_created_inline(container, customer):
    order = container.order_service.save_order(
        {'customer_id': customer.id},
        new_equipment={'brand': 'Samsung', 'model': 'A52', 'serial_number': 'SN1'},
    )
    equipment = container.equipment_service.get_equipment(order.equipment_id)
    assert equipment.customer_id == customer.id
    assert equipment.label == 'Samsung A52'
    assert equipment.type == 'Smartphone'

    with pytest.raises(ValidationError):
        container.order_service.save_order({'customer_id': customer.id}, new_equipment={'brand': 'LG'})


def test_invalid_values_rejected(container, customer, equipment):
    base = {'customer_id': customer.id, 'equipment_id': equipment.id}
    with pytest.raises(ValidationError):
        container.order_service.save_order({**base, 'status': 'Perdido'})
    with pytest.raises(ValidationError):
        container.order_service.save_order({**base, 'payment_status': 'Fiado'})
    with pytest.raises(ValidationError):
        container.order_service.save_order({**base, 'priority': 'Imediata'})
    with pytest.raises(ValidationError):
        container.order_service.save_order({**base, 'labor_cost': -10})
    with pytest.raises(ValidationError):
        container.order_service.save_order({**base, 'items': [{'product_id': 'p', 'quantity': 0}]})


def test_closing_marks_delivered_and_paid(container, customer, equipment):
    order = container.order_service.save_order(
        {'customer_id': customer.id, 'equipment_id': equipment.id, 'payment_method': 'Pix'},
        closing=True,
    )
    assert order.status == OrderStatus.DELIVERED.value
    assert order.payment_status == PaymentStatus.PAID.value
    assert order.history[-1].status == OrderStatus.DELIVERED.value
    assert _days_between(order.updated_at, order.warranty_expiry_date) == timedelta(days=90)


def test_default_warranty_comes_from_settings(container, customer, equipment):
    container.settings_service.save_default_warranty(30)
    order = container.order_service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id})
    assert order.warranty_days == 30

    explicit = container.order_service.save_order(
        {'customer_id': customer.id, 'equipment_id': equipment.id, 'warranty_days': 180})
    assert explicit.warranty_days == 180


def test_update_keeps_number_and_creation_date(container, customer, equipment):
    service = container.order_service
    order = service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id,
                                'problem_description': 'Não liga'})
    updated = service.save_order({'id': order.id, 'technical_report': 'Trocar bateria',
                                  'status': OrderStatus.BUDGET.value})
    assert updated.order_number == order.order_number
    assert updated.created_at == order.created_at
    assert updated.problem_description == 'Não liga'
    assert updated.technical_report == 'Trocar bateria'
    assert len(updated.history) == 2
    assert len(service.list_orders()) == 1


def test_null_items_keep_existing_items(container, customer, equipment):
    service = container.order_service
    order = service.save_order({
        'customer_id': customer.id,
        'equipment_id': equipment.id,
        'items': [{'product_id': 'p1', 'quantity': 1, 'price_at_time': 10, 'cost_at_time': 4}],
    })
    updated = service.save_order({'id': order.id, 'items': None, 'technical_report': 'Ok'})
    assert [i.product_id for i in updated.items] == ['p1']
    assert updated.total == 10.0

    cleared = service.save_order({'id': order.id, 'items': []})
    assert cleared.items == []


def test_change_status_appends_history(container, customer, equipment):
    service = container.order_service
    order = service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id,
                                'warranty_days': 60})
    changed = service.change_status(order.id, OrderStatus.IN_REPAIR.value, 'Peça chegou')
    assert changed.history[-1].status == OrderStatus.IN_REPAIR.value
    assert changed.history[-1].note == 'Peça chegou'
    assert changed.warranty_expiry_date is None

    delivered = service.change_status(order.id, OrderStatus.DELIVERED.value)
    assert _days_between(delivered.updated_at, delivered.warranty_expiry_date) == timedelta(days=60)
    assert len(service.get_order(order.id).history) == 3

    with pytest.raises(ValidationError):
        service.change_status(order.id, 'Sumiu')


def test_add_occurrence(container, customer, equipment):
    service = container.order_service
    order = service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id})
    occurrence = service.add_occurrence(order.id, 'Cliente pediu urgência', 'Alerta')
    stored = service.get_order(order.id).occurrences
    assert stored[0].id == occurrence.id
    assert stored[0].type == 'Alerta'

    with pytest.raises(ValidationError):
        service.add_occurrence(order.id, '   ')
    with pytest.raises(ValidationError):
        service.add_occurrence(order.id, 'x', 'Urgente')


def test_search_by_number_customer_and_model(container, customer, equipment):
    service = container.order_service
    other = container.customer_service.save_customer({'name': 'Pedro Lima', 'phone': '11900000000'})
    notebook = container.equipment_service.save_equipment(
        {'customer_id': other.id, 'brand': 'Dell', 'model': 'Inspiron'})
    first = service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id})
    second = service.save_order({'customer_id': other.id, 'equipment_id': notebook.id})

    assert [o.id for o in service.search('1001')] == [first.id]
    assert [o.id for o in service.search('pedro')] == [second.id]
    assert [o.id for o in service.search('iphone')] == [first.id]
    assert len(service.search('')) == 2


def test_quick_add_customer(container):
    customer = container.order_service.quick_add_customer('  Rita  ', '11987650000')
    assert customer.name == 'Rita'
    assert container.customer_service.get_customer(customer.id).phone == '11987650000'
    with pytest.raises(ValidationError):
        container.order_service.quick_add_customer('Rita', '')


def test_delete_order(container, customer, equipment):
    service = container.order_service
    order = service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id})
    service.delete_order(order.id)
    assert service.list_orders() == []
    with pytest.raises(NotFoundError):
        service.get_order(order.id)
    with pytest.raises(NotFoundError):
        service.delete_order(order.id)


def test_deleting_customer_keeps_orders(container, customer, equipment):
    order = container.order_service.save_order({'customer_id': customer.id, 'equipment_id': equipment.id})
    container.customer_service.delete_customer(customer.id)
    assert container.order_service.get_order(order.id).customer_id == customer.id
    assert container.equipment_service.list_for_customer(customer.id)
