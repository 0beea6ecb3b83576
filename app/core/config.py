from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_WORDPRESS_API_URL = 'https://pff-815f04.ingress-florina.ewp.live/graphql'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    app_name: str = 'Punti Furbi'
    environment: str = 'development'
    debug: bool = True
    log_level: str = 'INFO'

    # Empty key disables checkout instead of failing at import time.
    stripe_secret_key: str = ''
    stripe_webhook_secret: str = ''

    public_base_url: str = Field(
        default='',
        validation_alias=AliasChoices('public_base_url', 'next_public_base_url'),
    )
    site_url: str = 'https://puntifurbi.com'

    wordpress_api_url: str = DEFAULT_WORDPRESS_API_URL
    request_timeout: int = 30
    blog_page_size: int = 12
    content_cache_seconds: int = 60
    content_cache_max_entries: int = 256
    deploy_version: str = 'dev'

    cors_allow_origins: list[str] = ['*']

    @property
    def checkout_enabled(self) -> bool:
        return bool(self.stripe_secret_key.strip())


settings = Settings()
