# server/askbudi/routes/keys.py
"""Session-authenticated API key management for the current user."""
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from askbudi import keys
from askbudi.auth import get_current_user
from askbudi.database import get_db
from askbudi.models import ApiKey, User
from askbudi.schemas import (
    ApiKeyCreateRequest,
    ApiKeyResponse,
    ApiKeyUpdateRequest,
    ApiKeyWithSecret,
)

router = APIRouter(prefix="/v1/users/me/api-keys", tags=["keys"])


def _to_response(db: Session, api_key: ApiKey) -> ApiKeyResponse:
    response = ApiKeyResponse.model_validate(api_key)
    response.quota_used = keys.key_window_usage(db, api_key)
    return response


@router.get("", response_model=list[ApiKeyResponse])
def list_keys(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the user's keys, newest first. Secrets are never included."""
    return [_to_response(db, api_key) for api_key in keys.list_api_keys(db, user.id)]


@router.post("", response_model=ApiKeyWithSecret, status_code=201)
def create_key(
    request: ApiKeyCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Issue a key. This is the only response that carries the secret."""
    api_key, secret = keys.create_api_key(db, user.id, name=request.name)
    return ApiKeyWithSecret(
        **ApiKeyResponse.model_validate(api_key).model_dump(),
        api_key=secret,
    )


@router.put("/{key_id}", response_model=ApiKeyResponse)
def update_key(
    key_id: str,
    request: ApiKeyUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    api_key = keys.update_api_key(
        db,
        user.id,
        key_id,
        name=request.name,
        is_active=request.is_active,
        name_set="name" in request.model_fields_set,
    )
    return _to_response(db, api_key)


@router.delete("/{key_id}", status_code=204)
def delete_key(
    key_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    keys.delete_api_key(db, user.id, key_id)
    return Response(status_code=204)
