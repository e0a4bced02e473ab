from .settings_service import SettingsService
from .token_authority import TokenAuthority

__all__ = ["SettingsService", "TokenAuthority"]
