"""Configuration loader for secret-store."""
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from .models import BackendTarget
from .preferences import get_preference

logger = logging.getLogger(__name__)

SUPPORTED_AUTH_TYPES = ("service_account", "application_default")
_SECTIONS = ("authentication", "gcp")


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    return Path.home() / ".config" / "secret-store" / "config.yml"


def _get_config_path() -> str:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference (stored in ~/.config/secret-store/preferences.json)
    2. Default location: ~/.config/secret-store/config.yml

    Returns:
        Absolute path to config file

    Raises:
        FileNotFoundError: If config file doesn't exist in any location
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Either set GCP_PROJECT, or set up a config file:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   secret-store config set-path /path/to/your/config.yml\n"
    )


def _apply_profile(config: Dict[str, Any], profile: str, config_path: str) -> Dict[str, Any]:
    profiles = config.get("profiles") or {}
    if profile not in profiles:
        available = ", ".join(sorted(profiles)) or "none"
        raise ConfigError(
            f"Profile '{profile}' not found in config at {config_path}\n"
            f"Available profiles: {available}"
        )

    overrides = profiles[profile] or {}
    merged = {key: value for key, value in config.items() if key != "profiles"}
    for section in _SECTIONS:
        merged[section] = {**(config.get(section) or {}), **(overrides.get(section) or {})}
    return merged


def _validate(config: Dict[str, Any], config_path: str) -> None:
    auth = config.get("authentication") or {}
    auth_type = auth.get("type", "application_default")

    if auth_type not in SUPPORTED_AUTH_TYPES:
        raise ConfigError(
            f"Unsupported authentication type: {auth_type}\n"
            f"Supported types: {', '.join(SUPPORTED_AUTH_TYPES)}"
        )

    if auth_type == "service_account":
        service_account_path = auth.get("service_account_path")
        if not service_account_path:
            raise ConfigError(
                "Missing 'authentication.service_account_path' in config\n"
                "Please specify the absolute path to your service account JSON file."
            )
        if not os.path.isfile(service_account_path):
            raise ConfigError(
                f"Service account file not found at: {service_account_path}\n"
                f"Please ensure the file exists or update the path in {config_path}"
            )


def load_config(profile: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Args:
        profile: Name of a section under 'profiles' to merge over the top level

    Returns:
        Dict containing configuration with keys:
        - authentication: dict with type and optional service_account_path
        - gcp: dict with project_id and optional location

    Raises:
        FileNotFoundError: If no config file exists
        ConfigError: If config file is invalid or the profile doesn't exist
    """
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}") from e

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")
    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    if profile:
        config = _apply_profile(config, profile, config_path)

    _validate(config, config_path)

    logger.info(f"Configuration loaded successfully from {config_path}")
    return config


def resolve_target(profile: Optional[str] = None, region: Optional[str] = None) -> BackendTarget:
    """
    Work out which project and location commands should talk to.

    Priority order, for the project:
    1. gcp.project_id of an explicitly selected profile (or its fallback to the top level)
    2. GCP_PROJECT environment variable
    3. Top-level gcp.project_id in the config file

    and for the location: --region, GCP_LOCATION, then the (profile) config.
    Service account credentials from the config are exported through
    GOOGLE_APPLICATION_CREDENTIALS.

    Raises:
        ConfigError: If no project id can be determined
    """
    env_project = os.getenv("GCP_PROJECT")
    env_location = os.getenv("GCP_LOCATION")

    try:
        config = load_config(profile)
    except FileNotFoundError as e:
        if profile or not env_project:
            raise ConfigError(str(e)) from e
        logger.debug("No config file found, using environment only")
        config = {}

    gcp = config.get("gcp") or {}
    if profile:
        # gcp.project_id already carries the profile's override
        project_id = gcp.get("project_id") or env_project
    else:
        project_id = env_project or gcp.get("project_id")
    if not project_id:
        raise ConfigError(
            "Project ID not found. Please set GCP_PROJECT environment variable "
            "or configure gcp.project_id in the config file"
        )

    auth = config.get("authentication") or {}
    if auth.get("type") == "service_account":
        os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = auth["service_account_path"]
        logger.debug(f"Set GOOGLE_APPLICATION_CREDENTIALS from config: {auth['service_account_path']}")

    location = region or env_location or gcp.get("location")
    logger.debug(f"Using project '{project_id}', location '{location or 'global'}'")
    return BackendTarget(project_id=project_id, location=location)
