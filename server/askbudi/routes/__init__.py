# server/askbudi/routes/__init__.py
from askbudi.routes.auth import router as auth_router
from askbudi.routes.keys import router as keys_router
from askbudi.routes.account import router as account_router
from askbudi.routes.libraries import router as libraries_router
from askbudi.routes.billing import router as billing_router

__all__ = ["auth_router", "keys_router", "account_router", "libraries_router", "billing_router"]
