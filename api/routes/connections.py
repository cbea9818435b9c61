"""Connection metadata endpoints.

Metadata is free-form JSON attached to connections (e.g. the NetSuite
account id or sync preferences). Connections are addressed either by
connection token, or by connection id plus provider config key. Requests
are all-or-nothing: if any addressed connection is unknown, nothing is
updated.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from core.config import load_settings
from core.connections.store import ConnectionStore, SqliteConnectionStore
from core.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


IdList = Union[str, List[str]]


class UpdateMetadataBody(BaseModel):
    """Request body for setting or updating connection metadata."""

    model_config = ConfigDict(extra="forbid")

    connection_id: Optional[IdList] = None
    connection_token: Optional[IdList] = None
    provider_config_key: Optional[str] = Field(default=None, min_length=1)
    metadata: Dict[str, Any]

    @model_validator(mode="after")
    def check_addressing(self) -> "UpdateMetadataBody":
        for name in ("connection_id", "connection_token"):
            value = getattr(self, name)
            values = value if isinstance(value, list) else [value] if value is not None else []
            if any(not v for v in values):
                raise ValueError(f"{name} entries must be non-empty strings")

        if self.connection_tokens:
            return self
        if self.connection_ids and self.provider_config_key:
            return self
        raise ValueError(
            "Either connection_token or connection_id and provider_config_key must be provided"
        )

    @property
    def connection_ids(self) -> List[str]:
        return _to_list(self.connection_id)

    @property
    def connection_tokens(self) -> List[str]:
        return _to_list(self.connection_token)


def _to_list(value: Optional[IdList]) -> List[str]:
    if isinstance(value, list):
        return value
    return [value] if value else []


def _validation_errors(error: ValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "code": e["type"],
            "message": e["msg"],
            "path": [str(p) for p in e["loc"]],
        }
        for e in error.errors()
    ]


def _error(status_code: int, code: str, **fields) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"code": code, **fields}})


_store: Optional[ConnectionStore] = None


def get_connection_store() -> ConnectionStore:
    """Connection store dependency (SQLite, path from settings)."""
    global _store
    if _store is None:
        _store = SqliteConnectionStore(load_settings().connections_db_path)
    return _store


def get_environment_id(x_environment_id: int = Header(default=1)) -> int:
    """Environment the caller is scoped to."""
    return x_environment_id


async def _apply_metadata(
    request: Request,
    store: ConnectionStore,
    environment_id: int,
    merge: bool,
) -> JSONResponse:
    if request.query_params:
        return _error(
            400,
            "invalid_query_params",
            errors=[
                {"code": "unrecognized_keys", "message": f"Unrecognized key: {key}", "path": [key]}
                for key in request.query_params.keys()
            ],
        )

    try:
        raw_body = await request.json()
    except ValueError:
        return _error(400, "invalid_body", errors=[{"code": "invalid_json", "message": "Body must be JSON", "path": []}])

    try:
        body = UpdateMetadataBody.model_validate(raw_body)
    except ValidationError as e:
        return _error(400, "invalid_body", errors=_validation_errors(e))

    if body.connection_tokens:
        tokens = list(dict.fromkeys(body.connection_tokens))
        connections = await store.get_by_tokens(tokens)
        known = {c.connection_token for c in connections}
        unknown = [t for t in tokens if t not in known]
        if unknown:
            return _error(
                404,
                "unknown_connection",
                message=(
                    f"Connection with connection tokens: {', '.join(unknown)} not found. "
                    "No actions were taken on any of the connections as a result of this failure."
                ),
            )
    else:
        ids = list(dict.fromkeys(body.connection_ids))
        connections = await store.get_by_ids(ids, body.provider_config_key, environment_id)
        known = {c.connection_id for c in connections}
        unknown = [i for i in ids if i not in known]
        if unknown:
            return _error(
                404,
                "unknown_connection",
                message=(
                    f"Connection with connection ids: {', '.join(unknown)} and provider config key "
                    f"{body.provider_config_key} not found. "
                    "No actions were taken on any of the connections as a result of this failure."
                ),
            )

    if merge:
        await store.merge_metadata(connections, body.metadata)
    else:
        await store.update_metadata(connections, body.metadata)

    logger.info(
        "Connection metadata updated",
        extra_fields={"connections": [c.connection_id for c in connections], "merge": merge},
    )
    return JSONResponse(status_code=200, content=raw_body)


@router.post("/metadata")
async def set_metadata(
    request: Request,
    store: ConnectionStore = Depends(get_connection_store),
    environment_id: int = Depends(get_environment_id),
) -> JSONResponse:
    """Replace the metadata of one or more connections."""
    return await _apply_metadata(request, store, environment_id, merge=False)


@router.patch("/metadata")
async def update_metadata(
    request: Request,
    store: ConnectionStore = Depends(get_connection_store),
    environment_id: int = Depends(get_environment_id),
) -> JSONResponse:
    """Merge metadata into one or more connections."""
    return await _apply_metadata(request, store, environment_id, merge=True)
