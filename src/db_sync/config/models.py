"""Pydantic models for the db-sync YAML configuration."""

from urllib.parse import quote

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_TIMEOUT_SECONDS = 3600


# ============================================================================
# Datasource Models
# ============================================================================


class DataSourceConfig(BaseModel):
    """Connection settings for one datasource.

    ``url`` has the form ``host:port/database``; the database part is
    optional.

    Example:
        >>> ds = DataSourceConfig(url="127.0.0.1:3306/app", username="root")
        >>> ds.database_url()
        'mysql+aiomysql://root:@127.0.0.1:3306/app?charset=utf8mb4'
    """

    url: str = ""
    username: str = ""
    password: str = ""  # May be empty

    def database_url(self) -> str:
        """Build a SQLAlchemy async URL for this datasource."""
        host_port, _, database = self.url.rpartition("/")
        if not host_port:
            # No "/" at all: the whole url is host:port
            host_port, database = self.url, ""
        user = quote(self.username, safe="")
        password = quote(self.password, safe="")
        return (
            f"mysql+aiomysql://{user}:{password}@{host_port}/{database}"
            "?charset=utf8mb4"
        )

    def display_name(self) -> str:
        """Return ``username@url`` for logs (never includes the password)."""
        return f"{self.username}@{self.url}"


# ============================================================================
# Sync and Log Settings
# ============================================================================


class SyncSettings(BaseModel):
    """The ``sync`` section: what to copy and how."""

    source: str = ""
    target: str = ""
    batch_size: int = 0
    concurrency: int = 1
    truncate_before_sync: bool = False
    exclude_tables: list[str] = Field(default_factory=list)
    include_tables: list[str] = Field(default_factory=list)
    timeout: int = DEFAULT_TIMEOUT_SECONDS  # Seconds per object
    verbose: bool = False

    @field_validator("concurrency")
    @classmethod
    def _default_concurrency(cls, value: int) -> int:
        return value if value > 0 else 1

    @field_validator("timeout")
    @classmethod
    def _default_timeout(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_TIMEOUT_SECONDS

    @field_validator("exclude_tables", "include_tables", mode="before")
    @classmethod
    def _none_is_empty(cls, value: list[str] | None) -> list[str]:
        return value or []


class LogSettings(BaseModel):
    """The ``log`` section."""

    level: str = "info"
    file: str | None = None
    console: bool = True


# ============================================================================
# Root Config
# ============================================================================


class AppConfig(BaseModel):
    """Complete configuration loaded from ``config.yaml``."""

    datasources: dict[str, DataSourceConfig] = Field(default_factory=dict)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    @model_validator(mode="after")
    def _check_references(self) -> "AppConfig":
        if not self.datasources:
            raise ValueError("at least one datasource must be configured (datasources)")
        for alias, ds in self.datasources.items():
            if not ds.url:
                raise ValueError(f"datasource [{alias}]: url must not be empty")
            if not ds.username:
                raise ValueError(f"datasource [{alias}]: username must not be empty")

        if self.sync.batch_size <= 0:
            raise ValueError("sync.batch_size must be greater than 0")
        if not self.sync.source:
            raise ValueError("sync.source must not be empty (source datasource alias)")
        if not self.sync.target:
            raise ValueError("sync.target must not be empty (target datasource alias)")
        if self.sync.source not in self.datasources:
            raise ValueError(f"unknown source datasource alias: {self.sync.source}")
        if self.sync.target not in self.datasources:
            raise ValueError(f"unknown target datasource alias: {self.sync.target}")
        return self

    def source_config(self) -> DataSourceConfig:
        """Return the datasource named by ``sync.source``."""
        return self.datasources[self.sync.source]

    def target_config(self) -> DataSourceConfig:
        """Return the datasource named by ``sync.target``."""
        return self.datasources[self.sync.target]
