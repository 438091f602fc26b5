# -*- coding: utf-8 -*-
"""
Secret Manager on Google Cloud as a staged secret store.

Secret Manager numbers versions itself and has no notion of stages, so the
rotation bookkeeping lives on the secret resource:

annotations     "version-id.<token>" -> version number assigned by Secret Manager
                "pending-version"    -> the token being rotated in (may have no version yet)
version_aliases "current"            -> version number consumers should read
                "previous"           -> version number demoted by the last promotion

Consumers should read projects/<p>/secrets/<s>/versions/current rather than latest, a
pending version is added as an ordinary enabled version well before it is promoted. A
secret without a current alias, such as one holding a login that is never rotated, is
read at latest.

Every change of stages is one update_secret call carrying the etag that was read, so a
concurrent writer makes the call fail instead of interleaving.
"""

import logging
import re
import threading

import google.auth
import google_crc32c
from google.api_core import exceptions
from google.cloud import secretmanager

from .exceptions import SecretVersionNotFound, StageMoveConflict
from .stores import CURRENT, PENDING, PREVIOUS, SecretMetadata, SecretStore

VERSION_ANNOTATION_PREFIX = "version-id."
PENDING_ANNOTATION = "pending-version"
STAGE_ALIASES = {CURRENT: "current",
                 PREVIOUS: "previous"}


class GCPSecretStore(SecretStore):
    """A `SecretStore` backed by GCP Secret Manager.

    Uses thread-local clients and credentials in the same way as the rest of the
    library so one instance can be shared between threads of a Cloud Function.

    Args:
        endpoint (str, optional): api endpoint override, e.g. a regional endpoint.
        _credentials_callback (callable, optional): returns a tuple of
            (credentials, project_id). `google.auth.default()` is used if not given.
    """

    NOT_FOUND_EXCEPTIONS = (exceptions.NotFound, SecretVersionNotFound)

    def __init__(self, endpoint=None, _credentials_callback=None):
        self._endpoint = endpoint
        self._credentials_callback = _credentials_callback
        self.ns = threading.local()

    @property
    def credentials(self):
        if not hasattr(self.ns, "_credentials"):
            if self._credentials_callback is not None:
                _credentials, _project_id = self._credentials_callback()
            else:
                _credentials, _project_id = google.auth.default()
            self.ns._credentials = _credentials
        return self.ns._credentials

    @property
    def _client(self):
        if not hasattr(self.ns, "client"):
            client_options = None
            if self._endpoint:
                client_options = {"api_endpoint": self._endpoint}
            self.ns.client = secretmanager.SecretManagerServiceClient(
                credentials=self.credentials,
                client_options=client_options
            )
        return self.ns.client

    def _get_secret(self, secret_id):
        return self._client.get_secret(request={"name": secret_id})

    def _update_secret(self, secret, annotations, aliases):
        self._client.update_secret(
            request={
                "secret": {
                    "name": secret.name,
                    "etag": secret.etag,
                    "annotations": annotations,
                    "version_aliases": aliases,
                },
                "update_mask": {"paths": ["annotations", "version_aliases"]},
            }
        )

    @staticmethod
    def _version_numbers(secret):
        return {key[len(VERSION_ANNOTATION_PREFIX):]: value
                for key, value in secret.annotations.items()
                if key.startswith(VERSION_ANNOTATION_PREFIX)}

    def _metadata(self, secret_id, secret):
        numbers = self._version_numbers(secret)
        tokens = {number: token for token, number in numbers.items()}
        versions = {token: set() for token in numbers}

        # versions created outside a rotation are known by their number
        for stage, alias in STAGE_ALIASES.items():
            if alias in secret.version_aliases:
                number = str(secret.version_aliases[alias])
                versions.setdefault(tokens.get(number, number), set()).add(stage)

        pending = secret.annotations.get(PENDING_ANNOTATION)
        if pending:
            versions.setdefault(pending, set()).add(PENDING)

        rotation_enabled = ("rotation" in secret and
                            secret.rotation.next_rotation_time is not None)
        return SecretMetadata(secret_id=secret_id,
                              rotation_enabled=rotation_enabled,
                              versions=versions)

    def _resolve(self, secret_id, secret, version_id=None, stage=None):
        """Maps a selector to the Secret Manager version number.

        A secret that has never been rotated has no current alias, its CURRENT value is
        the latest version as for any other reader of Secret Manager.
        """
        if (stage == CURRENT and version_id is None and
                STAGE_ALIASES[CURRENT] not in secret.version_aliases):
            return "latest"

        if stage is not None:
            holder = self._metadata(secret_id, secret).version_with_stage(stage)
            if holder is None or (version_id is not None and holder != version_id):
                raise SecretVersionNotFound(secret_id, version_id, stage)
            version_id = holder

        if version_id is None:
            raise SecretVersionNotFound(secret_id, version_id, stage)

        numbers = self._version_numbers(secret)
        if version_id in numbers:
            return numbers[version_id]
        # a pending token has no number until its value is added
        if version_id.isdigit() and version_id != secret.annotations.get(PENDING_ANNOTATION):
            return version_id
        raise SecretVersionNotFound(secret_id, version_id, stage)

    def describe_secret(self, secret_id):
        return self._metadata(secret_id, self._get_secret(secret_id))

    def get_secret_value(self, secret_id, version_id=None, stage=None):
        secret = self._get_secret(secret_id)
        number = self._resolve(secret_id, secret, version_id, stage)
        response = self._client.access_secret_version(
            request={"name": f"{secret_id}/versions/{number}"})
        return response.payload.data.decode("utf-8")

    def put_secret_value(self, secret_id, version_id, value, stages):
        secret = self._get_secret(secret_id)
        if version_id in self._version_numbers(secret):
            raise exceptions.AlreadyExists(f"Secret {secret_id} already has version {version_id}")

        payload = value
        if not isinstance(payload, bytes):
            payload = payload.encode("utf8")

        crc32c = google_crc32c.Checksum()
        crc32c.update(payload)
        response = self._client.add_secret_version(
            request={
                "parent": secret_id,
                "payload": {"data": payload, "data_crc32c": int(crc32c.hexdigest(), 16)},
            }
        )
        number = re.search(r"/versions/([0-9]+)$", response.name).group(1)

        annotations = dict(secret.annotations)
        aliases = dict(secret.version_aliases)
        annotations[VERSION_ANNOTATION_PREFIX + version_id] = number
        for stage in stages:
            if stage == PENDING:
                annotations[PENDING_ANNOTATION] = version_id
            else:
                aliases[STAGE_ALIASES[stage]] = int(number)

        try:
            self._update_secret(secret, annotations, aliases)
        except Exception:
            # an unmapped version would be served as latest and never found by its token
            logging.getLogger(__name__).exception(
                f"Recording version {number} of {secret_id} as {version_id} failed, destroying it")
            self._client.destroy_secret_version(request={"name": response.name})
            raise
        logging.getLogger(__name__).info(
            f"Added version {number} of {secret_id} as {version_id} stages {sorted(stages)}")

    def update_version_stage(self, secret_id, stage, move_to_version_id,
                             remove_from_version_id=None):
        secret = self._get_secret(secret_id)
        holder = self._metadata(secret_id, secret).version_with_stage(stage)
        if holder != remove_from_version_id:
            raise StageMoveConflict(secret_id, stage, remove_from_version_id)

        annotations = dict(secret.annotations)
        aliases = dict(secret.version_aliases)

        if stage == PENDING:
            if move_to_version_id is None:
                annotations.pop(PENDING_ANNOTATION, None)
            else:
                annotations[PENDING_ANNOTATION] = move_to_version_id
        else:
            number = self._resolve(secret_id, secret, move_to_version_id)
            aliases[STAGE_ALIASES[stage]] = int(number)

        if stage == CURRENT:
            if remove_from_version_id is not None:
                aliases[STAGE_ALIASES[PREVIOUS]] = int(
                    self._resolve(secret_id, secret, remove_from_version_id))
            if annotations.get(PENDING_ANNOTATION) == move_to_version_id:
                del annotations[PENDING_ANNOTATION]

            # only tokens still holding a stage stay mapped, annotations are size limited
            keep = {move_to_version_id, remove_from_version_id,
                    annotations.get(PENDING_ANNOTATION)}
            for token in self._version_numbers(secret):
                if token not in keep:
                    del annotations[VERSION_ANNOTATION_PREFIX + token]

        self._update_secret(secret, annotations, aliases)
        logging.getLogger(__name__).info(
            f"Moved {stage} of {secret_id} from {remove_from_version_id} to {move_to_version_id}")

    def begin_rotation(self, secret_id, version_id):
        if version_id.isdigit():
            raise ValueError(f"Version id {version_id} would be read as a version number of "
                             f"{secret_id}, use a non numeric request token")
        secret = self._get_secret(secret_id)
        pending = secret.annotations.get(PENDING_ANNOTATION)
        if pending == version_id:
            return
        if pending:
            logging.getLogger(__name__).warning(
                f"Secret {secret_id} abandons pending version {pending} for {version_id}")

        annotations = dict(secret.annotations)
        annotations[PENDING_ANNOTATION] = version_id
        self._update_secret(secret, annotations, dict(secret.version_aliases))
