# ==============================================================================
# ASISTENTE DE IA (Gemini REST API)
# ==============================================================================
# Sugerencia de laudo técnico e ideas de negocio. Ante cualquier falla
# (sin clave, error HTTP, respuesta vacía) retorna un texto fijo.
# ==============================================================================

import json
import logging
from typing import Any, Dict, Optional

import requests

from fixos.errors import ExternalServiceError

logger = logging.getLogger(__name__)

REPORT_FALLBACK = "Não foi possível gerar sugestão automática."
INSIGHTS_FALLBACK = "Dicas de IA indisponíveis no momento."


class AssistantService:
    def __init__(self, api_key: Optional[str], model: str = 'gemini-1.5-flash',
                 base_url: str = 'https://generativelanguage.googleapis.com/v1beta/models',
                 timeout: float = 10.0):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        """
        Envía el prompt y retorna el texto generado.
        Lanza ExternalServiceError si no hay clave, falla la llamada
        o la respuesta viene vacía.
        """
        if not self.api_key:
            raise ExternalServiceError("GEMINI_API_KEY não configurada.")
        url = f"{self.base_url}/{self.model}:generateContent"
        payload = {'contents': [{'parts': [{'text': prompt}]}]}
        try:
            response = requests.post(url, params={'key': self.api_key}, json=payload,
                                     timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as err:
            raise ExternalServiceError(f"Erro na API de IA: {err}") from err
        except ValueError as err:
            raise ExternalServiceError(f"Resposta inválida da API de IA: {err}") from err

        try:
            parts = data['candidates'][0]['content']['parts']
            text = ''.join(p.get('text', '') for p in parts).strip()
        except (KeyError, IndexError, TypeError, AttributeError):
            text = ''
        if not text:
            raise ExternalServiceError("Resposta vazia da API de IA.")
        return text

    def generate_technical_report(self, problem_description: str) -> str:
        """
        Sugiere un laudo técnico para el defecto relatado.

        Args:
            problem_description: Defecto informado por el cliente

        Returns:
            Texto generado, o REPORT_FALLBACK si la IA no responde
        """
        prompt = (
            f'Com base no seguinte problema técnico relatado: "{problem_description}", '
            'gere uma sugestão curta e profissional de laudo técnico de reparo (em português) '
            'para ser enviado ao cliente. Seja direto e explique o que provavelmente precisa ser feito.'
        )
        try:
            return self.generate(prompt)
        except ExternalServiceError as e:
            logger.warning(f"Laudo por IA no disponible: {e.message}")
            return REPORT_FALLBACK

    def get_business_insights(self, stats: Dict[str, Any]) -> str:
        """
        Tres sugerencias de negocio a partir de las métricas del panel.

        Returns:
            Markdown corto, o INSIGHTS_FALLBACK si la IA no responde
        """
        prompt = (
            'Como consultor de negócios, analise estes dados de uma oficina: '
            f'{json.dumps(stats, ensure_ascii=False, default=str)}. '
            'Forneça 3 dicas rápidas para aumentar os lucros ou melhorar a eficiência. '
            'Formate em markdown curto.'
        )
        try:
            return self.generate(prompt)
        except ExternalServiceError as e:
            logger.warning(f"Dicas por IA no disponibles: {e.message}")
            return INSIGHTS_FALLBACK
