import os
from dataclasses import dataclass, field


def _split_origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class ServiceConfig:
    data_dir: str = "./data"
    default_name: str = "default"
    host: str = "0.0.0.0"
    port: int = 3000
    static_root: str = "."
    allow_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def load_config() -> ServiceConfig:
    """Build a ServiceConfig from MODEL_* environment variables."""
    return ServiceConfig(
        data_dir=os.getenv("MODEL_DATA_DIR", "./data"),
        default_name=os.getenv("MODEL_DEFAULT_NAME", "default"),
        host=os.getenv("MODEL_HOST", "0.0.0.0"),
        port=int(os.getenv("MODEL_PORT", "3000")),
        static_root=os.getenv("MODEL_STATIC_ROOT", os.getcwd()),
        allow_origins=_split_origins(os.getenv("MODEL_ALLOW_ORIGINS", "*")),
        log_level=os.getenv("MODEL_LOG_LEVEL", "INFO").upper(),
    )
