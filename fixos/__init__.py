# ==============================================================================
# FixOS - Gestión de asistencia técnica
# ==============================================================================
# Paquetes:
#   models        → entidades y cálculos de totales
#   repositories  → base local JSON, espejo SQL en la nube, outbox
#   services      → reglas de negocio por pantalla
#   main          → app Flask (create_app)
# ==============================================================================

__version__ = '1.0.0'
