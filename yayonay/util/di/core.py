"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from yayonay.config import EngagementSettings, Settings
from yayonay.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Settings for every layer, read once per container from the environment."""

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return Settings()

    @provide(scope=Scope.APP)
    def provide_engagement_settings(self, settings: Settings) -> EngagementSettings:
        return settings.engagement
