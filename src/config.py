"""
Configuration loading: .env variables, the ${env:...} resolver and Hydra composition.
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import hydra
from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR = REPO_ROOT / 'conf'
CONFIG_NAME = 'config'


def register_resolvers() -> None:
    """Load .env variables and register the env and repo_root resolvers once."""
    load_dotenv()
    if not OmegaConf.has_resolver('env'):
        OmegaConf.register_new_resolver('env', os.getenv)
    if not OmegaConf.has_resolver('repo_root'):
        OmegaConf.register_new_resolver('repo_root', lambda: str(REPO_ROOT))


def load_config(overrides: Optional[List[str]] = None,
                config_dir: Optional[Path] = None,
                config_name: str = CONFIG_NAME) -> DictConfig:
    """
    Compose the Hydra configuration.

    Args:
        overrides: Hydra override strings, e.g. ["index.mode=PREFIXES"]
        config_dir: Directory holding the config files (default: repo conf/)
        config_name: Name of main config file

    Returns:
        Composed config
    """
    register_resolvers()
    config_dir = Path(config_dir or CONFIG_DIR).resolve()
    with hydra.initialize_config_dir(version_base=None, config_dir=str(config_dir)):
        config = hydra.compose(config_name=config_name, overrides=list(overrides or []))
    logger.debug(f"Loaded config {config_name} from {config_dir} with overrides {overrides}")
    return config


def setup_logging(config: DictConfig) -> None:
    """Configure root logging from the logging section."""
    logging.basicConfig(
        level=getattr(logging, config.logging.level),
        format=config.logging.format
    )
