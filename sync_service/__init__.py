"""
Servicio de sincronizacion one-way: base relacional -> indice de busqueda.

Este paquete esta disenado para ejecutarse como proceso batch (scheduler),
sin API de red propia.

Objetivos de diseno:
- Idempotencia: cada documento se indexa por un id estable (upsert).
- Incremental: se apoya en un watermark persistido (`last_sync_time`).
- Reconciliacion: un job aparte elimina documentos huerfanos del indice.
- Aislamiento: el fallo de un job no afecta a los demas.
"""

__version__ = "1.0.0"
