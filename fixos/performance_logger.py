# ==============================================================================
# PROFILING DE RUTAS
# ==============================================================================
# Mide el tiempo de cada request y lo guarda en logs legibles:
# - performance.log  → todas las rutas
# - slow_routes.log  → rutas que superan los umbrales
#
# ACTIVAR/DESACTIVAR: app.config['ENABLE_PROFILING']
# ==============================================================================

import logging
import os
import threading
import time
from datetime import datetime

from flask import Flask, g, request

logger = logging.getLogger(__name__)

# Umbrales en milisegundos
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'

# Nombres legibles por regla de Flask
ROUTE_NAMES = {
    'GET /api/dashboard': 'Ver painel',
    'GET /api/orders': 'Listar O.S.',
    'POST /api/orders': 'Salvar O.S.',
    'GET /api/orders/<order_id>/print': 'Imprimir O.S.',
    'POST /api/orders/<order_id>/status': 'Alterar status da O.S.',
    'POST /api/orders/<order_id>/occurrences': 'Registrar ocorrência',
    'GET /api/finance': 'Ver financeiro',
    'GET /api/accounts': 'Listar lançamentos',
    'POST /api/cart/items': 'Adicionar ao carrinho',
    'POST /api/cart/checkout': 'Finalizar venda',
    'POST /api/sync/replay': 'Reenviar pendentes',
    'POST /api/sync/push': 'Enviar base local',
}

_write_lock = threading.Lock()


def _timestamp() -> str:
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _route_name(method: str, path: str, rule: str) -> str:
    return ROUTE_NAMES.get(f"{method} {rule}") or f"{method} {path}"


class RouteProfiler:
    def __init__(self, logs_dir: str):
        self.logs_dir = logs_dir
        os.makedirs(self.logs_dir, exist_ok=True)

    def _write(self, filename: str, content: str) -> None:
        path = os.path.join(self.logs_dir, filename)
        try:
            with _write_lock:
                with open(path, 'a', encoding='utf-8') as f:
                    f.write(content)
        except OSError as e:
            logger.warning(f"No se pudo escribir {filename}: {e}")

    def log_route(self, method: str, path: str, rule: str, time_ms: float) -> None:
        self._write(PERFORMANCE_LOG, f"""
════════════════════════════════════════
[PERFORMANCE] {_timestamp()}
────────────────────────────────────────
Ação: {_route_name(method, path, rule)}
Rota: {method} {path}
Tempo: {time_ms:.0f} ms
""")

    def log_slow_route(self, method: str, path: str, rule: str, time_ms: float,
                       level: str = 'WARNING') -> None:
        threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL
        severity = 'LENTA' if level == 'WARNING' else 'MUITO LENTA'
        self._write(SLOW_ROUTES_LOG, f"""
[{level}] {_timestamp()}
────────────────────────────────────────
Rota {severity}: {_route_name(method, path, rule)}
Detalhe: {method} {path}
Tempo: {time_ms:.0f} ms (limite: {threshold} ms)
────────────────────────────────────────
""")

    def record(self, method: str, path: str, rule: str, elapsed_ms: float) -> None:
        self.log_route(method, path, rule, elapsed_ms)
        if elapsed_ms >= THRESHOLD_CRITICAL:
            self.log_slow_route(method, path, rule, elapsed_ms, 'CRITICAL')
        elif elapsed_ms >= THRESHOLD_WARNING:
            self.log_slow_route(method, path, rule, elapsed_ms, 'WARNING')


def init_profiling(app: Flask, logs_dir: str) -> None:
    """
    Registra hooks before_request / after_request en la app.

    Uso:
        init_profiling(app, settings.FIXOS_LOG_DIR)
    """
    if not app.config.get('ENABLE_PROFILING', True):
        return
    profiler = RouteProfiler(logs_dir)
    app.extensions['route_profiler'] = profiler

    @app.before_request
    def _start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        if not hasattr(g, 'start_time') or request.path.startswith('/static'):
            return response
        elapsed = (time.perf_counter() - g.start_time) * 1000
        rule = str(request.url_rule) if request.url_rule else request.path
        profiler.record(request.method, request.path, rule, elapsed)
        return response
