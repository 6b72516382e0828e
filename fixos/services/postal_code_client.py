# ==============================================================================
# CLIENTE DE CEP (ViaCEP)
# ==============================================================================
# Autocompleta la dirección de un cliente a partir del código postal.
# ==============================================================================

import logging
import re
from typing import Any, Dict, Optional

import requests

from fixos.errors import ExternalServiceError

logger = logging.getLogger(__name__)


def normalize_zip(zip_code: Optional[str]) -> str:
    """Solo dígitos."""
    return re.sub(r'\D', '', zip_code or '')


def format_address(data: Dict[str, Any]) -> str:
    """'logradouro, bairro, localidade - uf'"""
    return f"{data.get('logradouro', '')}, {data.get('bairro', '')}, {data.get('localidade', '')} - {data.get('uf', '')}"


class PostalCodeClient:
    def __init__(self, base_url: str = 'https://viacep.com.br/ws', timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def fetch(self, cep: str) -> Dict[str, Any]:
        """
        Consulta la API. cep debe tener 8 dígitos.
        Lanza ExternalServiceError si la API falla o no conoce el CEP.
        """
        url = f"{self.base_url}/{cep}/json/"
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as err:
            raise ExternalServiceError(f"Erro ao consultar CEP {cep}: {err}") from err
        except ValueError as err:
            raise ExternalServiceError(f"Resposta inválida para CEP {cep}: {err}") from err
        if not isinstance(data, dict) or data.get('erro'):
            raise ExternalServiceError(f"CEP não encontrado: {cep}")
        return data

    def lookup(self, zip_code: Optional[str]) -> Optional[str]:
        """
        Dirección formateada, o None si el CEP es inválido, no existe
        o la API no respondió.
        """
        cep = normalize_zip(zip_code)
        if len(cep) != 8:
            return None
        try:
            return format_address(self.fetch(cep))
        except ExternalServiceError as e:
            logger.warning(e.message)
            return None
