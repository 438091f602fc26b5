# -*- coding: utf-8 -*-
"""
Entry points for the platforms that trigger rotations.

lambda_handler  - AWS Secrets Manager rotation, one phase per invocation
rotate_secret   - GCP Secret Manager SECRET_ROTATE Pub/Sub notification, the whole
                  rotation in one invocation as Secret Manager only says it is time
"""

import json
import logging

from .aws_store import AWSSecretStore
from .config import RotationConfig
from .coordinator import RotationCoordinator, RotationRequest
from .gcp_store import GCPSecretStore
from .probes import BlockbookBalanceProbe

STORES = {"gcp": GCPSecretStore,
          "aws": AWSSecretStore}


def build_coordinator(config=None):
    """Wires a `RotationCoordinator` from config, read from the environment if None."""
    if config is None:
        config = RotationConfig.from_env()

    store = STORES[config.store_backend](endpoint=config.store_endpoint)
    probe = None
    if config.probe_api_url:
        probe = BlockbookBalanceProbe(config.probe_api_url, timeout=config.http_timeout)
    return RotationCoordinator(store, config, probe=probe)


def lambda_handler(event, context=None, coordinator=None):
    request = RotationRequest.from_event(event)
    if coordinator is None:
        coordinator = build_coordinator()
    coordinator.rotate(request)


def rotate_secret(attributes, data, coordinator=None):
    """
    Handles the Pub/Sub message Secret Manager publishes when a secret is due for rotation.

    Args:
        attributes (dict): The attributes of the Pub/Sub message. Expected to
            contain `eventType` and `secretId`.
        data (bytes): The data payload of the Pub/Sub message, the secret resource as JSON.

    Returns:
        str: the request token of the rotation attempt, None if the event was ignored.
    """
    data = json.loads(data.decode("utf-8"))
    if (
        attributes.get("eventType") != "SECRET_ROTATE"
        or "secretId" not in attributes
        or "rotation" not in data
    ):
        logging.getLogger(__name__).warning(
            f"Received event that does not meet predicates for secret rotation attributes:"
            f"{json.dumps(attributes)}"
        )
        return None

    if coordinator is None:
        coordinator = build_coordinator()
    return coordinator.rotate_all(attributes["secretId"])
