from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PORT: int = 3001
    HOST: str = "0.0.0.0"
    FRONTEND_URL: str
    LOCAL_ORIGIN: str = "http://localhost:3000"
    SUPABASE_URL: str
    SUPABASE_SERVICE_ROLE_KEY: str
    PROPERTIES_TABLE: str = "properties"
    IMAGES_BUCKET: str = "property-images"
    REQUEST_TIMEOUT: float = 30.0
    # Update has no owner check unless this is on; delete always checks.
    ENFORCE_UPDATE_OWNERSHIP: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @property
    def allowed_origins(self) -> list[str]:
        origins = [self.LOCAL_ORIGIN.rstrip("/")]
        if self.FRONTEND_URL:
            origins.append(self.FRONTEND_URL.rstrip("/"))
        return origins

    @property
    def login_redirect_url(self) -> str:
        return f"{self.FRONTEND_URL.rstrip('/')}/dashboard"
