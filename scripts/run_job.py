"""
CLI: ejecuta un job del servicio una sola vez (fuera del scheduler).

Uso recomendado:
  - Re-sync administrativo o diagnostico.
  - No debe correr en paralelo con el servicio para el mismo pipeline.

Ejecucion:
  python scripts/run_job.py --job sync-updated-items
  python scripts/run_job.py --job sync-updated-items --from-timestamp 2024-01-01T00:00:00Z
  python scripts/run_job.py --job prune-removed-items
  python scripts/run_job.py --job create-collection
  python scripts/run_job.py --schema-only
"""
import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

load_dotenv(_ROOT / ".env", override=False)

from sync_service.application.use_cases.prune_use_cases import JOB_NAME as PRUNE_JOB_NAME
from sync_service.application.use_cases.sync_use_cases import JOB_NAME as SYNC_JOB_NAME
from sync_service.core.config import settings
from sync_service.core.events import build_index_client, configure_logging
from sync_service.core.jobs import CREATE_COLLECTION_JOB_NAME, SyncJobFactory
from sync_service.infrastructure.database.session import AsyncSessionLocal, close_db, init_db
from sync_service.infrastructure.external.typesense.schema import build_collection_schema
from sync_service.shared.utils.datetime_utils import parse_iso_datetime


JOBS = (CREATE_COLLECTION_JOB_NAME, SYNC_JOB_NAME, PRUNE_JOB_NAME)


async def _run(job: str, from_timestamp: Optional[datetime] = None) -> int:
    index = build_index_client(settings)
    factory = SyncJobFactory(settings, index, AsyncSessionLocal)
    try:
        await init_db()

        if job == CREATE_COLLECTION_JOB_NAME:
            created = await factory.ensure_collection()
            logger.info(f"Coleccion {settings.INDEX_COLLECTION}: {'creada' if created else 'ya existia'}")
            return 0

        if job == PRUNE_JOB_NAME:
            result = await factory.run_prune()
            logger.info(
                f"Prune {result.status}: revisados={result.scanned}, "
                f"eliminados={len(result.pruned)}, fallidos={len(result.failed)}"
            )
            return 0 if result.status == "completed" and not result.failed else 1

        if from_timestamp:
            await factory.reset_watermark(from_timestamp)

        result = await factory.run_sync_tick()
        logger.info(
            f"Sync {result.status}: traidos={result.fetched}, documentos={result.documents}, "
            f"ok={len(result.synced)}, fallidos={len(result.failed)}, pendiente={result.more_pending}"
        )
        return 0 if result.status != "aborted" and not result.failed else 1
    finally:
        await index.aclose()
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description="Ejecuta un job de sincronizacion una sola vez.")
    parser.add_argument(
        "--job",
        choices=JOBS,
        default=SYNC_JOB_NAME,
        help="Job a ejecutar (default: sync-updated-items).",
    )
    parser.add_argument(
        "--from-timestamp",
        default=None,
        help="Reinicia el watermark a este instante ISO-8601 antes de sincronizar (re-sync).",
    )
    parser.add_argument(
        "--schema-only",
        action="store_true",
        help="Imprime el esquema de la coleccion Typesense y termina.",
    )
    args = parser.parse_args()

    if args.schema_only:
        print(json.dumps(build_collection_schema(settings.INDEX_COLLECTION), indent=2))
        return 0

    if args.from_timestamp and args.job != SYNC_JOB_NAME:
        raise SystemExit("--from-timestamp solo aplica a sync-updated-items")

    since = None
    if args.from_timestamp:
        try:
            since = parse_iso_datetime(args.from_timestamp)
        except ValueError as e:
            raise SystemExit(f"Timestamp invalido: {e}")

    configure_logging(settings)
    return asyncio.run(_run(args.job, since))


if __name__ == "__main__":
    raise SystemExit(main())
