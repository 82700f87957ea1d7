from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from fee_policy.policy.estimator import Estimator
from fee_policy.policy.fee_estimator_config import FEE_ESTIMATOR_SECTION, FeeEstimatorConfig
from fee_policy.policy.shared_estimator import SharedEstimator
from fee_policy.util.config import DEFAULT_ROOT_PATH, load_config
from fee_policy.util.fee_policy_logging import initialize_service_logging

SERVICE_NAME = "fee_estimator"

log = logging.getLogger(__name__)


def create_fee_estimator(
    root_path: Path = DEFAULT_ROOT_PATH, filename: Union[str, Path] = "config.yaml"
) -> SharedEstimator:
    """
    Set up logging from the `logging` section of the config file and return an
    estimator tuned by its `fee_estimator` section, ready to be shared by the pool threads.
    """
    config = load_config(root_path, filename)
    initialize_service_logging(service_name=SERVICE_NAME, config=config, root_path=root_path)

    estimator_config = FeeEstimatorConfig.from_dict(config.get(FEE_ESTIMATOR_SECTION) or {})
    estimator = Estimator(estimator_config)
    log.info(
        f"Fee estimator started with {estimator.tx_confirm_stat.bucket_count} buckets, "
        f"max confirm blocks: {estimator_config.max_confirm_blocks}"
    )
    return SharedEstimator(estimator)
