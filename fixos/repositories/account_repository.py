# ==============================================================================
# REPOSITORIO DE CUENTAS A PAGAR / COBRAR
# ==============================================================================

from fixos.models import FinancialAccount
from fixos.repositories.mirrored import MirroredRepository


class AccountRepository(MirroredRepository[FinancialAccount]):
    """Cuentas financieras, por fecha de vencimiento."""
    entity_cls = FinancialAccount
    table_name = 'financialAccounts'
    order_by = 'due_date'
