from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    database_url: str
    backend_cors_origins: str = "http://localhost:5173"
    sql_echo: bool = False
    api_prefix: str = "/api"
    public_base_url: Optional[str] = None   # base de los enlaces de aprobación; si no, la URL de la petición
    log_level: str = "INFO"

    # SMTP (fastapi-mail)
    mail_username: str = ""
    mail_password: str = ""
    mail_from: str = "noreply@example.com"
    mail_from_name: Optional[str] = None
    mail_server: str = "localhost"
    mail_port: int = 587
    mail_starttls: bool = True
    mail_ssl_tls: bool = False
    mail_use_credentials: bool = True
    mail_suppress_send: bool = False
    mail_subject_prefix: str = "[DS]"

    class Config:
        env_file = ".env"
        extra = "allow"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.backend_cors_origins.split(",") if origin.strip()]
