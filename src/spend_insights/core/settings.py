import os

from dotenv import find_dotenv, load_dotenv

from spend_insights.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"

_CONFIG_FILE_PATH: str | None = None
_CONFIG_FILE_VALUES: dict[str, str] = {}

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "LOG_COLOR",
    "SOURCE_ENCODING",
    "DATE_FORMATS",
)

DEFAULT_SOURCE_ENCODING = "utf-8-sig"

# Tried in order after ISO-8601. Month-first slashed dates come first because
# bank exports (Chase and friends) use them.
DEFAULT_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)

DATE_FORMAT_SEPARATOR = ";"


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    resolved = find_dotenv(usecwd=True)
    return resolved or None


def _resolve_config_path() -> str:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        return os.path.join(config_dir, CONFIG_FILENAME)
    cwd = os.getcwd()
    candidate = os.path.join(cwd, "config", CONFIG_FILENAME)
    if os.path.exists(candidate):
        return candidate
    return os.path.join(cwd, CONFIG_FILENAME)


def _clean_config_value(raw_value: str) -> str:
    value = raw_value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    # Unquoted values may carry a trailing comment
    return value.split(" #", 1)[0].rstrip()


def read_config_file(path: str | None) -> dict[str, str]:
    """Read ``KEY: value`` lines from a flat YAML-style config file."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            key = key.strip()
            value = _clean_config_value(raw_value)
            if key and value:
                values[key] = value
    return values


def load_environment() -> None:
    global _CONFIG_FILE_PATH
    global _CONFIG_FILE_VALUES

    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    _CONFIG_FILE_PATH = _resolve_config_path()
    _CONFIG_FILE_VALUES = read_config_file(_CONFIG_FILE_PATH)

    for key in _CONFIG_KEYS:
        if key not in os.environ and key in _CONFIG_FILE_VALUES:
            os.environ[key] = _CONFIG_FILE_VALUES[key]


def get_config_path() -> str | None:
    return _CONFIG_FILE_PATH


def get_env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def get_env_list(name: str, separator: str = ",") -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return []
    items: list[str] = []
    for part in raw.split(separator):
        item = part.strip()
        if item and item not in items:
            items.append(item)
    return items


def get_source_encoding() -> str:
    encoding = get_env_str("SOURCE_ENCODING", DEFAULT_SOURCE_ENCODING)
    try:
        "".encode(encoding)
    except LookupError:
        logger.warning(
            "[ENV] Unknown SOURCE_ENCODING='%s', using default %s.",
            encoding,
            DEFAULT_SOURCE_ENCODING,
        )
        return DEFAULT_SOURCE_ENCODING
    return encoding


def get_date_formats() -> tuple[str, ...]:
    formats = get_env_list("DATE_FORMATS", separator=DATE_FORMAT_SEPARATOR)
    return tuple(formats) if formats else DEFAULT_DATE_FORMATS


def log_environment() -> None:
    logger.info("[ENV] Config file: %s", get_config_path() or "<none>")
    for key in _CONFIG_KEYS:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else raw_value.replace("\n", "\\n")
        logger.info("[ENV] %s=%s", key, value)


load_environment()
