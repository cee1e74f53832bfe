from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./data/studio.sqlite3"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    log_level: str = "INFO"

    session_cookie_name: str = "studio_session"
    session_max_age_days: int = 30
    cookie_secure: bool = False
    cookie_samesite: str = "lax"

    admin_email: str = "admin@studiomilca.com"
    admin_login_enabled: bool = True
    admin_login_secret: str = ""  # empty = email-only admin login (local dev)

    google_drive_api_key: str = ""
    google_drive_api_url: str = "https://www.googleapis.com/drive/v3"
    mercado_pago_access_token: str = ""
    mercado_pago_api_url: str = "https://api.mercadopago.com"
    http_timeout_seconds: float = 15.0

    studio_name: str = "Studio Milca Fotografia"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
