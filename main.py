"""
Punto de entrada principal del servicio de sincronizacion.
Arranca el scheduler y espera una senal de cierre (SIGINT/SIGTERM).
"""
import asyncio
import signal
import sys

from loguru import logger

from sync_service.core.config import settings
from sync_service.core.events import configure_logging, shutdown, startup


async def run() -> int:
    """
    Ciclo de vida del servicio.

    Returns:
        int: codigo de salida (1 si el arranque falla)
    """
    try:
        context = await startup(settings)
    except Exception as e:
        logger.error(f"Error durante startup: {e}")
        logger.exception("Detalle del error:")
        await shutdown(None)
        return 1

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows: solo KeyboardInterrupt
            pass

    try:
        await stop_event.wait()
    finally:
        await shutdown(context)
    return 0


def main() -> int:
    configure_logging(settings)
    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrumpido por el usuario")
        return 0


if __name__ == "__main__":
    sys.exit(main())
