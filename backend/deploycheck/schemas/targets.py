"""
Pydantic schemas for the declared validation targets.

Defaults describe the stylze deployment; a JSON file with the same shape
overrides them.
"""
from pathlib import Path
from typing import Optional, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from deploycheck.config import settings
from deploycheck.services.models import Category, IssueKind, KIND_CATEGORIES


class TargetsError(Exception):
    """Targets file could not be read or validated."""


class ServiceTarget(BaseModel):
    """A service exposing a health endpoint."""
    name: str
    port: int = Field(..., gt=0, lt=65536)
    health_path: str = "/health"
    start_hint: Optional[str] = None


class DatabaseTarget(BaseModel):
    container: str = "stylze-postgres"
    admin_user: str = "postgres"
    user: str = "stylze_user"
    name: str = "stylze_db"
    host: str = "localhost"
    port: int = 5432
    password_env: str = "STYLZE_DB_PASSWORD"


class CacheTarget(BaseModel):
    container: str = "stylze-redis"
    url: str = "redis://localhost:6379"


class ConfigRule(BaseModel):
    """A forbidden pattern in a configuration source."""
    name: str
    pattern: str
    kind: IssueKind

    @field_validator("kind")
    @classmethod
    def _configuration_kind(cls, kind: IssueKind) -> IssueKind:
        if Category.CONFIGURATION not in KIND_CATEGORIES[kind]:
            raise ValueError(f"{kind.value} is not a configuration issue kind")
        return kind


def _flag_enabled(prefix: str) -> str:
    # Matches `PREFIX...=true`, `PREFIX...: bool = True`, `PREFIX...="1"`
    return rf"^\s*{prefix}\w*\s*(?::\s*\w+\s*)?=\s*[\"']?(?:true|1|yes|on)\b"


DEFAULT_CONFIG_RULES = [
    ConfigRule(name="Mock Mode", pattern=_flag_enabled("USE_MOCK"), kind=IssueKind.MOCK_ENABLED),
    ConfigRule(name="Debug Mode", pattern=_flag_enabled("DEBUG"), kind=IssueKind.DEBUG_ENABLED),
    ConfigRule(name="Local Storage", pattern=_flag_enabled("USE_LOCAL_STORAGE"), kind=IssueKind.LOCAL_STORAGE_ENABLED),
]


class ConfigSource(BaseModel):
    path: str
    required: bool = False


class EnvVarTarget(BaseModel):
    """An environment variable that must hold a real (non-default) value."""
    name: str
    required: bool = True


class EndpointTarget(BaseModel):
    """A representative API request against a declared service."""
    service: str
    path: str
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE"] = "GET"
    json_body: Optional[dict] = None
    auth_env: Optional[str] = None


class CredentialTarget(BaseModel):
    """An external API credential read from the environment."""
    name: str
    env: str
    prefix: Optional[str] = None
    is_path: bool = False


class SecurityTargets(BaseModel):
    source_files: list[str] = Field(default_factory=lambda: [
        "ai-styling-backend/services/user-service/production-server.js",
        "ai-styling-backend/services/wardrobe-service/app/config.py",
    ])
    https_url: str = "https://localhost:3001/health"
    tls_verify: bool = True
    rate_limit_url: str = "http://localhost:3001/health"
    rate_limit_burst: int = Field(10, gt=0)
    rate_limit_status: int = 429


class MonitoringTargets(BaseModel):
    prometheus_url: str = "http://localhost:9090"
    grafana_url: str = "http://localhost:3007"
    log_files: list[str] = Field(default_factory=lambda: [
        "ai-styling-backend/services/api-gateway/logs/combined.log",
        "ai-styling-backend/services/avatar-service/combined.log",
    ])


class CoverageTargets(BaseModel):
    test_dirs: list[str] = Field(default_factory=lambda: [
        "ai-styling-backend/services/user-service/tests",
        "ai-styling-backend/services/avatar-service/tests",
        "ai-styling-app/tests",
    ])
    markers: list[str] = Field(default_factory=lambda: [".test.", ".spec."])
    prefixes: list[str] = Field(default_factory=lambda: ["test_"])
    minimum: int = 10
    workflows_dir: str = ".github/workflows"


class ProductionConfigTarget(BaseModel):
    """Artifact written when mock mode is found enabled."""
    path: str = Field(default_factory=lambda: settings.PRODUCTION_CONFIG_PATH)
    secret_key: str = "JWT_SECRET"
    values: dict[str, str] = Field(default_factory=lambda: {
        "USE_MOCK_VISION_API": "false",
        "USE_LOCAL_STORAGE": "false",
        "DEBUG": "false",
        "NODE_ENV": "production",
    })


def _default_services() -> list[ServiceTarget]:
    ports = {
        "user": 3001,
        "wardrobe": 3002,
        "avatar": 3003,
        "recommendation": 3004,
        "notification": 3005,
        "ai": 8000,
        "gateway": 3010,
    }
    return [
        ServiceTarget(
            name=name,
            port=port,
            start_hint=f"cd ai-styling-backend/services/{name}-service && npm start"
        )
        for name, port in ports.items()
    ]


def _default_endpoints() -> list[EndpointTarget]:
    return [
        EndpointTarget(service="user", path="/api/v1/auth/login", method="POST",
                       json_body={"email": "test@test.com", "password": "test123"}),
        EndpointTarget(service="wardrobe", path="/api/v1/wardrobe/items", auth_env="STYLZE_API_TOKEN"),
        EndpointTarget(service="avatar", path="/api/v1/avatar/create", method="POST",
                       json_body={"userId": "test", "measurements": {"height": 170}},
                       auth_env="STYLZE_API_TOKEN"),
        EndpointTarget(service="ai", path="/api/v1/analyze/body", method="POST",
                       json_body={"user_id": "test", "image_data": "mock"}),
    ]


class Targets(BaseModel):
    """Everything a validation run probes."""
    host: str = Field(default_factory=lambda: settings.HOST)
    services: list[ServiceTarget] = Field(default_factory=_default_services)
    database: DatabaseTarget = Field(default_factory=DatabaseTarget)
    cache: CacheTarget = Field(default_factory=CacheTarget)
    config_sources: list[ConfigSource] = Field(default_factory=lambda: [
        ConfigSource(path="ai-styling-backend/services/wardrobe-service/app/config.py"),
        ConfigSource(path="ai-styling-backend/services/user-service/.env"),
        ConfigSource(path="ai-styling-ai/.env"),
    ])
    config_rules: list[ConfigRule] = Field(default_factory=lambda: list(DEFAULT_CONFIG_RULES))
    env_vars: list[EnvVarTarget] = Field(default_factory=lambda: [
        EnvVarTarget(name="GEMINI_API_KEY"),
        EnvVarTarget(name="VISION_API_KEY"),
        EnvVarTarget(name="JWT_SECRET"),
        EnvVarTarget(name="DATABASE_URL"),
    ])
    default_secret_markers: list[str] = Field(default_factory=lambda: [
        "dev", "changeme", "change-me", "secret", "example", "default",
    ])
    endpoints: list[EndpointTarget] = Field(default_factory=_default_endpoints)
    credentials: list[CredentialTarget] = Field(default_factory=lambda: [
        CredentialTarget(name="Gemini", env="GEMINI_API_KEY", prefix="AIza"),
        CredentialTarget(name="GCP", env="GOOGLE_APPLICATION_CREDENTIALS", is_path=True),
    ])
    security: SecurityTargets = Field(default_factory=SecurityTargets)
    monitoring: MonitoringTargets = Field(default_factory=MonitoringTargets)
    testing: CoverageTargets = Field(default_factory=CoverageTargets)
    production_config: ProductionConfigTarget = Field(default_factory=ProductionConfigTarget)

    @model_validator(mode="after")
    def _endpoints_reference_services(self) -> "Targets":
        known = {s.name for s in self.services}
        unknown = sorted({e.service for e in self.endpoints} - known)
        if unknown:
            raise ValueError(f"Endpoints reference undeclared services: {', '.join(unknown)}")
        return self

    def service(self, name: str) -> ServiceTarget:
        for target in self.services:
            if target.name == name:
                return target
        raise KeyError(name)


def load_targets(path: Optional[str] = None) -> Targets:
    """Load targets from a JSON file, or the built-in defaults when no path is given."""
    if not path:
        return Targets()

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise TargetsError(f"Cannot read targets file {path}: {e}") from e

    try:
        return Targets.model_validate_json(raw)
    except ValidationError as e:
        raise TargetsError(f"Invalid targets file {path}: {e}") from e
