"""YAML configuration for the search extraction stage."""

from dataclasses import dataclass, field
from pathlib import Path

from common.config import ConfigSingleton, find_config_path, load_yaml

CONFIG_DIR = Path(__file__).parent / "configs"
CONFIG_ENV_VAR = "SEARCH_EXTRACT_CONFIG"

DEFAULT_OUTPUT_FIELDS = [
    "id",
    "text",
    "user_id",
    "friends_count",
    "query",
    "mentions",
    "hashtags",
]


@dataclass
class ClientConfig:
    timeout: float = 30.0
    user_agent: str = "search-extract/1.0"

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"Invalid client timeout: {self.timeout}. Must be positive")


@dataclass
class StageConfig:
    output_fields: list[str] = field(default_factory=lambda: list(DEFAULT_OUTPUT_FIELDS))
    feedback_size: int = 50  # log progress every N emitted rows, 0 disables
    pass_through_input: bool = True
    client: ClientConfig = field(default_factory=ClientConfig)

    def __post_init__(self) -> None:
        if len(self.output_fields) != len(DEFAULT_OUTPUT_FIELDS):
            raise ValueError(
                f"output_fields must name {len(DEFAULT_OUTPUT_FIELDS)} fields, "
                f"got {len(self.output_fields)}"
            )
        if any(not name for name in self.output_fields):
            raise ValueError("output_fields must not contain empty names")
        if len(set(self.output_fields)) != len(self.output_fields):
            raise ValueError(f"output_fields must be unique: {self.output_fields}")
        if self.feedback_size < 0:
            raise ValueError(f"Invalid feedback_size: {self.feedback_size}. Must be >= 0")


def _parse_config(data: dict) -> StageConfig:
    """Parse config dictionary into StageConfig."""
    client_data = data.get("client") or {}
    client = ClientConfig(
        timeout=client_data.get("timeout", 30.0),
        user_agent=client_data.get("user_agent", "search-extract/1.0"),
    )
    return StageConfig(
        output_fields=list(data.get("output_fields") or DEFAULT_OUTPUT_FIELDS),
        feedback_size=data.get("feedback_size", 50),
        pass_through_input=data.get("pass_through_input", True),
        client=client,
    )


def load_config(name: str | None = None) -> StageConfig:
    """Load stage config by name (e.g. 'test' or 'prod') or path.

    Args:
        name: Config name without extension, a path to a YAML file, or None
            to use the SEARCH_EXTRACT_CONFIG env var (default "prod").

    Returns:
        StageConfig instance
    """
    config_path = find_config_path(name, CONFIG_DIR, env_var=CONFIG_ENV_VAR)
    return _parse_config(load_yaml(config_path))


_manager = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
