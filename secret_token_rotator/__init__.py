# -*- coding: utf-8 -*-
"""secret_token_rotator

Rotates a long lived api token held in a versioned secret store through the
createSecret, setSecret, testSecret and finishSecret phases without ever exposing a
token as current before it is proven to work.

"""

from secret_token_rotator.auth import AuthClient, \
    AuthLogin, \
    FullstackAuthClient, \
    TokenValidation, \
    UserData, \
    check_token
from secret_token_rotator.aws_store import AWSSecretStore
from secret_token_rotator.config import RotationConfig
from secret_token_rotator.coordinator import RotationCoordinator, RotationPhase, RotationRequest
from secret_token_rotator.exceptions import SecretRotatorError, \
    RotationDisabledError, \
    UnknownVersionError, \
    NotPendingError, \
    UnknownPhaseError, \
    MissingCurrentError, \
    AuthRegistrationError, \
    TokenInvalidError, \
    TokenMismatchError, \
    ProbeValidationError, \
    SecretVersionNotFound, \
    StageMoveConflict, \
    ConfigurationError, \
    InvalidRotationEvent
from secret_token_rotator.gcp_store import GCPSecretStore
from secret_token_rotator.handler import build_coordinator, lambda_handler, rotate_secret
from secret_token_rotator.probes import BlockbookBalanceProbe, ProbeResult, ValidationProbe
from secret_token_rotator.stores import CURRENT, PENDING, PREVIOUS, SecretMetadata, SecretStore
from ._version import __version__

__all__ = ["__version__",
           "CURRENT",
           "PENDING",
           "PREVIOUS",
           "SecretMetadata",
           "SecretStore",
           "GCPSecretStore",
           "AWSSecretStore",
           "AuthClient",
           "AuthLogin",
           "FullstackAuthClient",
           "TokenValidation",
           "UserData",
           "check_token",
           "ValidationProbe",
           "ProbeResult",
           "BlockbookBalanceProbe",
           "RotationConfig",
           "RotationCoordinator",
           "RotationPhase",
           "RotationRequest",
           "build_coordinator",
           "lambda_handler",
           "rotate_secret",
           "SecretRotatorError",
           "RotationDisabledError",
           "UnknownVersionError",
           "NotPendingError",
           "UnknownPhaseError",
           "MissingCurrentError",
           "AuthRegistrationError",
           "TokenInvalidError",
           "TokenMismatchError",
           "ProbeValidationError",
           "SecretVersionNotFound",
           "StageMoveConflict",
           "ConfigurationError",
           "InvalidRotationEvent"]
