"""
MLflow Utilities
================

Log feature metadata to the active MLflow run.
"""

from collections import Counter
from typing import Any, Dict, Iterable, Optional

import mlflow

from .config import config
from .logging import get_logger

logger = get_logger(__name__)


def sanitize_for_mlflow(params: Dict[str, Any]) -> Dict[str, str]:
    """
    Sanitize parameters for MLflow logging.

    - Removes None values
    - Converts all values to strings
    - Truncates long strings
    """
    sanitized = {}
    for key, value in params.items():
        if value is None:
            continue
        str_value = str(value)
        # MLflow has a 500 char limit for param values
        if len(str_value) > 500:
            str_value = str_value[:497] + "..."
        sanitized[key] = str_value
    return sanitized


def feature_params(features: Iterable[Any]) -> Dict[str, str]:
    """
    Summarize features as MLflow params.

    Args:
        features: Features to summarize

    Returns:
        Sanitized params: counts, response names and per-type counts
    """
    features = list(features)
    responses = [f.name for f in features if f.is_response]
    type_counts = Counter(f.feature_type.short_name() for f in features)

    params: Dict[str, Any] = {
        "feature_count": len(features),
        "feature_raw_count": sum(1 for f in features if f.is_raw),
        "feature_responses": ",".join(responses) if responses else None,
        "feature_config_version": config.version,
    }
    for type_name, count in sorted(type_counts.items()):
        params[f"feature_type_{type_name}"] = count
    return sanitize_for_mlflow(params)


def log_features_to_mlflow(
    features: Iterable[Any],
    artifact_file: Optional[str] = None,
) -> bool:
    """
    Log feature metadata to the active MLflow run.

    Args:
        features: Features to log
        artifact_file: JSON artifact name (uses config if None)

    Returns:
        True if metadata was logged, False if no run is active
    """
    if mlflow.active_run() is None:
        logger.warning("No active MLflow run")
        return False

    features = list(features)
    mlflow.log_params(feature_params(features))
    mlflow.log_dict(
        {"features": [f.to_dict() for f in features]},
        artifact_file or config.mlflow_artifact_file,
    )

    logger.info(f"Logged metadata of {len(features)} features to MLflow")
    return True
