# -*- coding: utf-8 -*-

class SecretRotatorError(Exception):
    """Base Error class."""


class RotationDisabledError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Secret {} rotation is disabled"

    def __init__(self, secret_id):
        super(RotationDisabledError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_id))
        self._secret_id = secret_id

    @property
    def secret_id(self):
        return self._secret_id


class UnknownVersionError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Secret version {} has no stage for rotation of secret {}"

    def __init__(self, secret_id, version_id):
        super(UnknownVersionError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(version_id,
                                                                                   secret_id))
        self._secret_id = secret_id
        self._version_id = version_id

    @property
    def secret_id(self):
        return self._secret_id

    @property
    def version_id(self):
        return self._version_id


class NotPendingError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Secret {} version {} is not set as PENDING"

    def __init__(self, secret_id, version_id):
        super(NotPendingError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_id,
                                                                               version_id))
        self._secret_id = secret_id
        self._version_id = version_id

    @property
    def secret_id(self):
        return self._secret_id

    @property
    def version_id(self):
        return self._version_id


class UnknownPhaseError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Unhandled rotation step {!r}"

    def __init__(self, phase):
        super(UnknownPhaseError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(phase))
        self._phase = phase

    @property
    def phase(self):
        return self._phase


class MissingCurrentError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Secret {} has no CURRENT version to rotate from"

    def __init__(self, secret_id):
        super(MissingCurrentError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_id))
        self._secret_id = secret_id

    @property
    def secret_id(self):
        return self._secret_id


class AuthRegistrationError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Login {} is not registered with the auth service"

    def __init__(self, login):
        super(AuthRegistrationError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(login))
        self._login = login

    @property
    def login(self):
        return self._login


class TokenInvalidError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Unable to validate api token: {}"

    def __init__(self, reason):
        super(TokenInvalidError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(reason))
        self._reason = reason

    @property
    def reason(self):
        return self._reason


class TokenMismatchError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Secret {} pending version {} does not match the live token " \
                           "from the auth service"

    def __init__(self, secret_id, version_id):
        super(TokenMismatchError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_id,
                                                                                  version_id))
        self._secret_id = secret_id
        self._version_id = version_id

    @property
    def secret_id(self):
        return self._secret_id

    @property
    def version_id(self):
        return self._version_id


class ProbeValidationError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Unable to validate token against the service: {}"

    def __init__(self, detail):
        super(ProbeValidationError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(detail))
        self._detail = detail

    @property
    def detail(self):
        return self._detail


class SecretVersionNotFound(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Secret {} has no version matching version_id={} stage={}"

    def __init__(self, secret_id, version_id=None, stage=None):
        super(SecretVersionNotFound, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_id,
                                                                                     version_id,
                                                                                     stage))
        self._secret_id = secret_id
        self._version_id = version_id
        self._stage = stage

    @property
    def secret_id(self):
        return self._secret_id

    @property
    def version_id(self):
        return self._version_id

    @property
    def stage(self):
        return self._stage


class StageMoveConflict(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Secret {} stage {} is not held by version {}"

    def __init__(self, secret_id, stage, version_id):
        super(StageMoveConflict, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_id,
                                                                                 stage,
                                                                                 version_id))
        self._secret_id = secret_id
        self._stage = stage
        self._version_id = version_id

    @property
    def secret_id(self):
        return self._secret_id

    @property
    def stage(self):
        return self._stage

    @property
    def version_id(self):
        return self._version_id


class ConfigurationError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Rotation configuration option {} is required"

    def __init__(self, option):
        super(ConfigurationError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(option))
        self._option = option

    @property
    def option(self):
        return self._option


class InvalidRotationEvent(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Rotation event is missing {}"

    def __init__(self, missing):
        super(InvalidRotationEvent, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(missing))
        self._missing = missing

    @property
    def missing(self):
        return self._missing
