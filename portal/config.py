# Hippies Portal - Configuration
# Application settings loaded from environment variables

from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Create a .env file in the project root for local development:

        # .env
        PORTAL_DB_URL=sqlite:///./portal.db
        PORTAL_SECRET_KEY=your-secret-key-change-in-production
        PORTAL_BREVO_API_KEY=xkeysib-...

    To run against SQL Server instead, leave PORTAL_DB_URL unset
    and fill in the PORTAL_DB_* values.
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Hippies Heaven Portal"
    debug: bool = False
    secret_key: str = "hippies-heaven-portal"
    log_level: str = "INFO"

    # Database - explicit URL wins over the SQL Server parts below
    db_url: Optional[str] = None
    sqlite_path: str = "./portal.db"

    # SQL Server connection (used when db_server is set)
    db_server: Optional[str] = None
    db_port: int = 1433
    db_name: str = "portal"
    db_user: str = "portal_app"
    db_password: str = "portal_password"
    db_trusted_connection: bool = False

    # Optional: Schema for all tables (SQL Server only)
    db_schema: Optional[str] = None

    # Connection pool settings
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800  # Recycle connections after 30 min

    # Session settings
    session_expire_minutes: int = 480  # 8 hours
    session_cookie_secure: bool = False
    bcrypt_rounds: int = 12

    # Transactional mail (Brevo)
    brevo_api_key: str = ""
    brevo_api_url: str = "https://api.brevo.com/v3/smtp/email"
    mail_sender_name: str = "Hippies Heaven Gift Shop"
    mail_sender_email: str = "hippiesautomation@gmail.com"
    mail_timeout_seconds: float = 10.0
    mail_contact_email: str = "hippiesheavengiftshop@gmail.com"
    portal_login_url: str = "https://hippiesheaven.com/login"

    # Business rules
    business_timezone: str = "America/Chicago"
    staff_timezone: str = "Asia/Manila"
    temp_password_length: int = 10
    min_password_length: int = 8
    announcements_page_size: int = 10
    max_message_length: int = 2000

    # Bootstrap admin (seeded by the data migration)
    bootstrap_admin_email: str = "admin@hippiesheaven.com"
    bootstrap_admin_name: str = "Portal Administrator"

    @property
    def database_url(self) -> str:
        """
        Build the SQLAlchemy connection URL.

        Order of precedence:
            1. PORTAL_DB_URL
            2. SQL Server via pyodbc when PORTAL_DB_SERVER is set
            3. Local SQLite file
        """
        if self.db_url:
            return self.db_url

        if self.db_server:
            if self.db_trusted_connection:
                # Windows Authentication
                connection_string = (
                    f"DRIVER={{ODBC Driver 17 for SQL Server}};"
                    f"SERVER={self.db_server},{self.db_port};"
                    f"DATABASE={self.db_name};"
                    f"Trusted_Connection=yes;"
                )
            else:
                # SQL Server Authentication
                connection_string = (
                    f"DRIVER={{ODBC Driver 17 for SQL Server}};"
                    f"SERVER={self.db_server},{self.db_port};"
                    f"DATABASE={self.db_name};"
                    f"UID={self.db_user};"
                    f"PWD={self.db_password};"
                )
            return f"mssql+pyodbc:///?odbc_connect={quote_plus(connection_string)}"

        return f"sqlite:///{self.sqlite_path}"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once.
    """
    return Settings()
