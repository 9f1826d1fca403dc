# server/askbudi/routes/libraries.py
"""Metered gateway endpoints.

Each request is checked for parameters, then for a valid key with quota
remaining, then dispatched to the catalog. Only successful dispatches are
written to the usage ledger; the response goes out whether or not that write
succeeds.
"""
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from askbudi import libraries, metrics
from askbudi.database import get_db
from askbudi.errors import InternalError, ValidationError
from askbudi.quota import QuotaCheck, require_api_key
from askbudi.schemas import (
    DocsRequestMeta,
    LibraryDocsResponse,
    LibrarySearchResponse,
    SearchRequestMeta,
)
from askbudi.usage import record_usage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/libraries", tags=["libraries"])

SEARCH_ENDPOINT = "/v1/libraries/search"
DOCS_ENDPOINT = "/v1/libraries/docs"


def parse_limit(raw: Optional[str], default: int, maximum: int) -> int:
    """Parse the ``limit`` query value, clamped to ``maximum``."""
    if raw is None or raw == "":
        return default
    try:
        limit = int(raw)
    except ValueError:
        raise ValidationError("limit must be a positive integer")
    if limit < 1:
        raise ValidationError("limit must be a positive integer")
    return min(limit, maximum)


def search_params(
    search_term: Optional[str] = None,
    limit: Optional[str] = None,
) -> SearchRequestMeta:
    if not search_term:
        raise ValidationError("search_term parameter is required")
    return SearchRequestMeta(
        search_term=search_term,
        limit=parse_limit(limit, 10, libraries.MAX_SEARCH_LIMIT),
    )


def docs_params(
    library_id: Optional[str] = None,
    prompt: Optional[str] = None,
    version: Optional[str] = None,
    limit: Optional[str] = None,
) -> DocsRequestMeta:
    if not library_id:
        raise ValidationError("library_id parameter is required")
    if not prompt:
        raise ValidationError("prompt parameter is required")
    return DocsRequestMeta(
        library_id=library_id,
        prompt=prompt,
        version=version or None,
        limit=parse_limit(limit, 5, libraries.MAX_DOCS_LIMIT),
    )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


# Parameter dependencies are declared before the key check so bad input is
# rejected before the key is looked up.
@router.get("/search", response_model=LibrarySearchResponse)
def search(
    params: SearchRequestMeta = Depends(search_params),
    check: QuotaCheck = Depends(require_api_key),
    db: Session = Depends(get_db),
):
    """Search the library catalog. Costs 1 request."""
    started = time.monotonic()
    try:
        response = libraries.search_libraries(params.search_term, params.limit)
    except Exception:
        logger.exception("Library search failed for user %s", check.user_id)
        metrics.gateway_requests.labels(endpoint=SEARCH_ENDPOINT, outcome="failed").inc()
        raise InternalError()

    record_usage(
        db,
        user_id=check.user_id,
        api_key_hash=check.key_hash,
        endpoint=SEARCH_ENDPOINT,
        request_meta=params,
        response_meta={"result_count": len(response["results"])},
        cost=libraries.SEARCH_COST,
        latency_ms=_elapsed_ms(started),
    )
    metrics.gateway_requests.labels(endpoint=SEARCH_ENDPOINT, outcome="served").inc()

    return response


@router.get("/docs", response_model=LibraryDocsResponse)
def docs(
    params: DocsRequestMeta = Depends(docs_params),
    check: QuotaCheck = Depends(require_api_key),
    db: Session = Depends(get_db),
):
    """Fetch documentation snippets for a library.

    Recorded with cost 5; counts as one request against the quota.
    """
    started = time.monotonic()
    try:
        response = libraries.get_library_docs(
            params.library_id, params.prompt, params.version, params.limit
        )
    except Exception:
        logger.exception("Library docs lookup failed for user %s", check.user_id)
        metrics.gateway_requests.labels(endpoint=DOCS_ENDPOINT, outcome="failed").inc()
        raise InternalError()

    record_usage(
        db,
        user_id=check.user_id,
        api_key_hash=check.key_hash,
        endpoint=DOCS_ENDPOINT,
        request_meta=params,
        response_meta={"snippet_count": len(response["snippets"])},
        cost=libraries.DOCS_COST,
        latency_ms=_elapsed_ms(started),
    )
    metrics.gateway_requests.labels(endpoint=DOCS_ENDPOINT, outcome="served").inc()

    return response
