"""
Cliente mínimo de Typesense REST API (sin SDKs externos).

Requisitos cubiertos:
- httpx async (una conexion reutilizable por proceso)
- header X-TYPESENSE-API-KEY
- timeout de conexion configurable
- errores no-2xx y de transporte -> SearchIndexError
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
from urllib.parse import quote

import httpx
from loguru import logger

from sync_service.domain.repositories.search_index import ISearchIndexClient, SearchPage
from sync_service.shared.exceptions.sync import SearchIndexError


@dataclass(frozen=True)
class TypesenseCredentials:
    base_url: str
    api_key: str


class TypesenseClient(ISearchIndexClient):
    """
    Cliente HTTP de Typesense.

    Importante:
    - No reintenta: los jobs reintentan en el siguiente tick.
    - 404 en delete y 409 en create se consideran idempotentes.
    """

    def __init__(
        self,
        credentials: TypesenseCredentials,
        *,
        connection_timeout_s: float = 4.0,
        request_timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._creds = credentials
        self._client = httpx.AsyncClient(
            base_url=credentials.base_url.rstrip("/"),
            headers={
                "X-TYPESENSE-API-KEY": credentials.api_key,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(request_timeout_s, connect=connection_timeout_s),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def health(self) -> bool:
        try:
            resp = await self._client.get("/health")
        except httpx.HTTPError as e:
            logger.warning(f"Typesense no responde al health check: {e}")
            return False
        if resp.status_code != 200:
            return False
        try:
            return bool(resp.json().get("ok"))
        except ValueError:
            return False

    async def collection_exists(self, name: str) -> bool:
        resp = await self._request("GET", f"/collections/{quote(name, safe='')}", allow=(404,))
        return resp.status_code == 200

    async def create_collection(self, schema: Dict[str, Any]) -> None:
        resp = await self._request("POST", "/collections", json=schema, allow=(409,))
        if resp.status_code == 409:
            logger.info(f"Coleccion {schema.get('name')} ya existia (409).")

    async def upsert_document(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        resp = await self._request(
            "POST",
            f"/collections/{quote(collection, safe='')}/documents",
            params={"action": "upsert"},
            json=document,
        )
        return resp.json()

    async def delete_document(self, collection: str, document_id: str) -> bool:
        resp = await self._request(
            "DELETE",
            f"/collections/{quote(collection, safe='')}/documents/{quote(document_id, safe='')}",
            allow=(404,),
        )
        return resp.status_code != 404

    async def search(
        self,
        collection: str,
        *,
        q: str,
        query_by: Sequence[str],
        page: int = 1,
        per_page: int = 250,
    ) -> SearchPage:
        resp = await self._request(
            "GET",
            f"/collections/{quote(collection, safe='')}/documents/search",
            params={
                "q": q,
                "query_by": ",".join(query_by),
                "page": page,
                "per_page": per_page,
            },
        )
        payload = resp.json()
        hits = [hit.get("document") or {} for hit in payload.get("hits") or []]
        return SearchPage(hits=hits, found=int(payload.get("found") or 0))

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        allow: Sequence[int] = (),
    ) -> httpx.Response:
        """
        Request HTTP sin reintentos.

        `allow` lista codigos no-2xx que el caller maneja como resultado valido.
        """
        try:
            resp = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            raise SearchIndexError(f"Typesense {method} {path} fallo: {e}") from e

        if 200 <= resp.status_code < 300 or resp.status_code in allow:
            return resp

        raise SearchIndexError(
            f"Typesense {method} {path} respondio {resp.status_code}: {resp.text}",
            status_code=resp.status_code,
        )
