"""
Cestas - Dependency Injection.

FastAPI dependencies for feature flags and the per-app service context.

Services live on ``app.state`` (set up by ``create_app``), so each app
instance (and each test app) owns its own tables registry and caches.
"""

from typing import Annotated

from fastapi import Depends, Request

from cestas.config import FeatureFlags, Settings, get_settings
from cestas.exceptions import FeatureDisabledException
from cestas.modules.cards.service import CardsService
from cestas.modules.tables.registry import TablesManager
from cestas.modules.users.service import UsersService


# =============================================================================
# Settings Dependencies
# =============================================================================


def get_features(settings: Annotated[Settings, Depends(get_settings)]) -> FeatureFlags:
    """Get feature flags from settings."""
    return settings.features


# =============================================================================
# Service context
# =============================================================================


def get_tables_manager(request: Request) -> TablesManager:
    return request.app.state.tables


def get_cards_service(request: Request) -> CardsService:
    return request.app.state.cards_service


def get_users_service(request: Request) -> UsersService:
    return request.app.state.users_service


# =============================================================================
# Feature Flag Guards
# =============================================================================


def require_feature(feature_name: str):
    """Create a dependency that requires a specific feature to be enabled."""

    def check_feature(features: Annotated[FeatureFlags, Depends(get_features)]) -> bool:
        if not getattr(features, feature_name, False):
            raise FeatureDisabledException(feature_name)
        return True

    return check_feature


require_cards = Depends(require_feature("cards"))
require_tables = Depends(require_feature("tables"))
require_users = Depends(require_feature("users"))
