# ==============================================================================
# SERVICIO DE CUENTAS A PAGAR / COBRAR
# ==============================================================================

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fixos.errors import NotFoundError, ValidationError
from fixos.models import AccountStatus, AccountType, FinancialAccount
from fixos.repositories.interfaces import IEntityRepository
from fixos.services.customer_service import clean

logger = logging.getLogger(__name__)

FILTER_ALL = 'TODOS'
TYPE_FILTERS = (FILTER_ALL,) + tuple(t.value for t in AccountType)
STATUS_FILTERS = (FILTER_ALL,) + tuple(s.value for s in AccountStatus)


class AccountService:
    """
    Lanzamientos financieros manuales.

    Responsabilidades:
    - Listar con filtro de tipo y de estado
    - Guardar / eliminar / alternar PENDENTE <-> PAGO
    - Resumen de pendientes del listado filtrado
    """

    def __init__(self, account_repo: IEntityRepository):
        self.account_repo = account_repo

    def list_accounts(self, type_filter: str = FILTER_ALL,
                      status_filter: str = FILTER_ALL) -> List[FinancialAccount]:
        """
        Lista lanzamientos filtrando por tipo y estado.

        Args:
            type_filter: 'TODOS', 'PAGAR' o 'RECEBER' (sin distinguir mayúsculas)
            status_filter: 'TODOS', 'PENDENTE' o 'PAGO'

        Raises:
            ValidationError: filtro desconocido
        """
        type_filter = (type_filter or FILTER_ALL).upper()
        status_filter = (status_filter or FILTER_ALL).upper()
        if type_filter not in TYPE_FILTERS:
            raise ValidationError(f"Filtro de tipo inválido: {type_filter}")
        if status_filter not in STATUS_FILTERS:
            raise ValidationError(f"Filtro de status inválido: {status_filter}")
        return [
            a for a in self.account_repo.list_all()
            if (type_filter == FILTER_ALL or a.type == type_filter)
            and (status_filter == FILTER_ALL or a.status == status_filter)
        ]

    def get_account(self, account_id: str) -> FinancialAccount:
        account = self.account_repo.get(account_id)
        if account is None:
            raise NotFoundError('Lançamento não encontrado.')
        return account

    def save_account(self, data: Dict[str, Any]) -> FinancialAccount:
        """
        Crea o actualiza un lanzamiento.

        Raises:
            ValidationError: falta descripción, monto o vencimiento
        """
        description = clean(data.get('description'))
        due_date = clean(data.get('due_date'))
        try:
            amount = round(float(data.get('amount') or 0), 2)
        except (TypeError, ValueError):
            raise ValidationError('Valor inválido.')
        if not description or not amount or not due_date:
            raise ValidationError('Preencha todos os campos.')
        try:
            datetime.strptime(due_date[:10], '%Y-%m-%d')
        except ValueError:
            raise ValidationError('Data de vencimento inválida (AAAA-MM-DD).')

        account = FinancialAccount.from_dict({**data, 'description': description,
                                              'due_date': due_date, 'amount': amount})
        if account.type not in (AccountType.PAYABLE.value, AccountType.RECEIVABLE.value):
            raise ValidationError(f"Tipo inválido: {account.type}")
        if account.status not in (AccountStatus.PENDING.value, AccountStatus.PAID.value):
            raise ValidationError(f"Status inválido: {account.status}")
        return self.account_repo.save(account)

    def delete_account(self, account_id: str) -> None:
        """
        Raises:
            NotFoundError: si el lanzamiento no existe
        """
        if not self.account_repo.delete(account_id):
            raise NotFoundError('Lançamento não encontrado.')

    def toggle_status(self, account_id: str) -> FinancialAccount:
        """
        Alterna PENDENTE <-> PAGO.

        Returns:
            Lanzamiento con el estado nuevo
        """
        account = self.get_account(account_id)
        account.status = (AccountStatus.PAID.value if account.is_pending
                          else AccountStatus.PENDING.value)
        self.account_repo.save(account)
        logger.info(f"Lançamento {account_id} -> {account.status}")
        return account

    @staticmethod
    def summary(accounts: List[FinancialAccount]) -> Dict[str, float]:
        """Totales pendientes (a pagar / a cobrar) de la lista dada."""
        def pending_total(kind: str) -> float:
            return round(sum(a.amount for a in accounts if a.type == kind and a.is_pending), 2)

        return {
            'pending_payable': pending_total(AccountType.PAYABLE.value),
            'pending_receivable': pending_total(AccountType.RECEIVABLE.value),
        }
