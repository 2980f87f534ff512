import git
import logging
import os
from pathlib import Path
from typing import Union
import yaml

from src.sysops.names import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "decoder_config.yaml"


def get_repo_root():
    """
    Get the root directory of the git repository. Fallback to current working directory if not a git repo

    Returns:
        str: The absolute path to the root directory of the git repository.
    """
    try:
        repo = git.Repo(search_parent_directories=True)
        return repo.git.rev_parse("--show-toplevel")
    except git.exc.InvalidGitRepositoryError:
        return os.getcwd()


def load_config(config_file: Union[Path, str, None] = None) -> dict:
    """
    Load the decoder configuration. Values from the YAML file override the
    defaults, unknown keys are kept as they are.

    Args:
        config_file: Path to a YAML file. If not given, decoder_config.yaml in
            the repository root is used when present.

    Returns:
        dict: The merged configuration.
    """
    cfg = dict(DEFAULT_CONFIG)
    if config_file is None:
        config_file = Path(get_repo_root()) / CONFIG_FILENAME
        if not config_file.exists():
            logger.info("No configuration file found, using defaults.")
            return cfg
    config_file = Path(config_file)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")
    with open(config_file, "r") as file:
        loaded = yaml.safe_load(file) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Configuration must be a mapping: {config_file}")
    cfg.update(loaded)
    logger.info(f"Configuration loaded from {config_file}")
    return cfg


def read_text_file(path: Union[Path, str]) -> str:
    assert os.path.isfile(path), f"Not a file: {path}"
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
