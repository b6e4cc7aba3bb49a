"""Utility modules."""

from .config import Config, config, load_config, load_feature_config
from .logging import setup_logging, get_logger
from .mlflow_utils import (
    feature_params,
    log_features_to_mlflow,
    sanitize_for_mlflow,
)

__all__ = [
    "Config",
    "config",
    "load_config",
    "load_feature_config",
    "setup_logging",
    "get_logger",
    "feature_params",
    "log_features_to_mlflow",
    "sanitize_for_mlflow",
]
