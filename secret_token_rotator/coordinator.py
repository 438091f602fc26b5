# -*- coding: utf-8 -*-
"""
Rotation of a long lived api token held in a staged secret store.

A rotation attempt is four phases invoked in order with the same secret id and request
token, the request token being the version id of the value rotated in.

createSecret  - mint a new token and store it as a new version staged PENDING
setSecret     - install the token on the consuming service, a no-op as the auth
                service accepts tokens when it mints them
testSecret    - prove the PENDING token works, read only
finishSecret  - move CURRENT onto the PENDING version in one store operation

Each invocation is stateless and re-validates the secret's stages before it does
anything, and every phase converges to the same end state when re-run after a partial
or complete earlier run. Retries belong to whatever triggers the phases, nothing here
retries.

no pending -> PENDING created -> PENDING installed -> PENDING tested -> CURRENT
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum

from .auth import AuthLogin, FullstackAuthClient
from .exceptions import AuthRegistrationError, \
    InvalidRotationEvent, \
    MissingCurrentError, \
    NotPendingError, \
    ProbeValidationError, \
    RotationDisabledError, \
    TokenInvalidError, \
    TokenMismatchError, \
    UnknownPhaseError, \
    UnknownVersionError
from .stores import CURRENT, PENDING


class RotationPhase(Enum):
    CREATE_SECRET = "createSecret"
    SET_SECRET = "setSecret"
    TEST_SECRET = "testSecret"
    FINISH_SECRET = "finishSecret"

    @classmethod
    def from_step(cls, step):
        try:
            return cls(step)
        except ValueError:
            raise UnknownPhaseError(step) from None


@dataclass(frozen=True)
class RotationRequest:
    secret_id: str
    request_token: str
    phase: RotationPhase

    @classmethod
    def from_event(cls, event):
        """Builds a request from a trigger event with SecretId, ClientRequestToken and Step."""
        missing = [key for key in ("SecretId", "ClientRequestToken", "Step") if not event.get(key)]
        if missing:
            raise InvalidRotationEvent(", ".join(missing))
        return cls(secret_id=event["SecretId"],
                   request_token=event["ClientRequestToken"],
                   phase=RotationPhase.from_step(event["Step"]))


class RotationCoordinator:
    """Validates rotation requests and runs the phase they name.

    Args:
        store (SecretStore): holds both the secret rotated and the auth service login.
        config (RotationConfig): endpoints and the location of the login secret.
        auth_client_factory (callable, optional): builds an `AuthClient` from an
            `AuthLogin`. Defaults to a `FullstackAuthClient` for `config.auth_service_url`.
        probe (ValidationProbe, optional): secondary check of a pending token in testSecret.
    """

    def __init__(self, store, config, auth_client_factory=None, probe=None):
        self._store = store
        self._config = config
        self._probe = probe
        if auth_client_factory is None:
            def auth_client_factory(login):
                return FullstackAuthClient(config.auth_service_url, login,
                                           timeout=config.http_timeout)
        self._auth_client_factory = auth_client_factory
        self._handlers = {
            RotationPhase.CREATE_SECRET: self.create_secret,
            RotationPhase.SET_SECRET: self.set_secret,
            RotationPhase.TEST_SECRET: self.test_secret,
            RotationPhase.FINISH_SECRET: self.finish_secret,
        }

    @property
    def store(self):
        return self._store

    @property
    def config(self):
        return self._config

    @property
    def probe(self):
        return self._probe

    def validate(self, request):
        """Checks the secret's stages allow the request to run.

        Returns:
            bool: False if the request token is already CURRENT and there is nothing to do.
        """
        arn, token = request.secret_id, request.request_token
        metadata = self.store.describe_secret(arn)
        if not metadata.rotation_enabled:
            raise RotationDisabledError(arn)
        if token not in metadata.versions:
            raise UnknownVersionError(arn, token)

        stages = metadata.stages_for(token)
        if CURRENT in stages:
            logging.getLogger(__name__).info(
                f"Secret {arn} version {token} is already set as {CURRENT}")
            return False
        if PENDING not in stages:
            raise NotPendingError(arn, token)
        return True

    def rotate(self, request):
        """Runs one phase of a rotation attempt to completion."""
        if not self.validate(request):
            return
        logging.getLogger(__name__).info(
            f"Running {request.phase.value} for {request.secret_id} version {request.request_token}")
        self._handlers[request.phase](request)

    def rotate_all(self, secret_id, request_token=None):
        """Drives a whole rotation attempt for stores without their own rotation scheduler.

        Stages the request token as PENDING then runs each phase in order, each one
        validated as if it had been triggered separately. The first failure stops the
        attempt, so a failed testSecret never reaches finishSecret.

        Returns:
            str: the request token, to re-run the same attempt after a failure.
        """
        if request_token is None:
            request_token = str(uuid.uuid4())
        self.store.begin_rotation(secret_id, request_token)
        for phase in RotationPhase:
            self.rotate(RotationRequest(secret_id, request_token, phase))
        logging.getLogger(__name__).info(f"Secret {secret_id} rotated to version {request_token}")
        return request_token

    def _auth_client(self):
        # username and password are stored in a separate secret
        login = AuthLogin.from_secret(
            self.store.get_secret_value(self.config.auth_credentials_secret, stage=CURRENT))
        logging.getLogger(__name__).info(
            f"Retrieved auth service login, username is {login.username}")
        client = self._auth_client_factory(login)
        if not client.register():
            raise AuthRegistrationError(login.username)
        return client

    def create_secret(self, request):
        arn, token = request.secret_id, request.request_token
        if self.store.find_secret_value(arn, stage=CURRENT) is None:
            raise MissingCurrentError(arn)

        if self.store.find_secret_value(arn, version_id=token, stage=PENDING) is not None:
            logging.getLogger(__name__).info(f"Pending version {token} of {arn} already exists")
            return

        client = self._auth_client()
        api_token = client.get_api_token(client.user_data.api_level)
        self.store.put_secret_value(arn, token, api_token, [PENDING])
        logging.getLogger(__name__).info(f"Set new pending version {token} for {arn}")

    def set_secret(self, request):
        # the auth service installs a token as it mints it
        return None

    def test_secret(self, request):
        arn, token = request.secret_id, request.request_token
        client = self._auth_client()
        result = client.validate_api_token()
        if not result.is_valid:
            raise TokenInvalidError(result.reason)

        pending = self.store.get_secret_value(arn, version_id=token, stage=PENDING)
        if pending != client.user_data.api_token:
            raise TokenMismatchError(arn, token)

        if self._probe is None:
            logging.getLogger(__name__).info(f"No probe configured, {arn} version {token} valid")
            return

        account = client.user_data.account
        try:
            probe_result = self._probe.check_account(account, pending)
        except Exception as e:
            raise ProbeValidationError(f"probe of {account} failed: {e}") from e
        if not probe_result.ok:
            raise ProbeValidationError(f"probe of {account} returned {probe_result.detail}")
        logging.getLogger(__name__).info(f"Secret {arn} version {token} passed probe")

    def finish_secret(self, request):
        arn, token = request.secret_id, request.request_token
        metadata = self.store.describe_secret(arn)
        current_version = metadata.version_with_stage(CURRENT)
        if current_version == token:
            logging.getLogger(__name__).info(
                f"Secret {arn} version {token} already tagged as {CURRENT}")
            return

        self.store.update_version_stage(arn, CURRENT,
                                        move_to_version_id=token,
                                        remove_from_version_id=current_version)
        logging.getLogger(__name__).info(f"Secret {arn} rotation finished")
