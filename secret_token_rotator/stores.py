# -*- coding: utf-8 -*-
"""
The secret store contract the rotation coordinator drives.

A secret is a set of versions, each version identified by an id the rotation caller
supplies and tagged with zero or more stages. CURRENT and PENDING are each carried by
at most one version at a time. Concrete stores translate these stage names to whatever
their backend calls them.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

CURRENT = "CURRENT"
PENDING = "PENDING"
PREVIOUS = "PREVIOUS"


@dataclass
class SecretMetadata:
    secret_id: str
    rotation_enabled: bool
    versions: dict = field(default_factory=dict)

    def stages_for(self, version_id):
        return self.versions.get(version_id, set())

    def version_with_stage(self, stage):
        for version_id, stages in self.versions.items():
            if stage in stages:
                return version_id
        return None


class SecretStore(ABC):
    """Abstract base class for a versioned secret store.

    Implementations own all locking and consistency. The coordinator assumes
    read-after-write consistency for metadata and relies on `update_version_stage`
    being a single atomic operation in the backend.
    """

    #: exceptions a backend raises when a selector matches no version
    NOT_FOUND_EXCEPTIONS = ()

    @abstractmethod
    def describe_secret(self, secret_id):
        """Returns the `SecretMetadata` for a secret."""

    @abstractmethod
    def get_secret_value(self, secret_id, version_id=None, stage=None):
        """Returns the string value of the version matching the selector.

        Raises one of `NOT_FOUND_EXCEPTIONS` when no version matches.
        """

    def find_secret_value(self, secret_id, version_id=None, stage=None):
        """Returns the value matching the selector or None if no version matches."""
        try:
            return self.get_secret_value(secret_id, version_id=version_id, stage=stage)
        except self.NOT_FOUND_EXCEPTIONS:
            logging.getLogger(__name__).debug(
                f"No version of {secret_id} matches version_id={version_id} stage={stage}")
            return None

    @abstractmethod
    def put_secret_value(self, secret_id, version_id, value, stages):
        """Stores value as a new version with id `version_id` tagged with `stages`."""

    @abstractmethod
    def update_version_stage(self, secret_id, stage, move_to_version_id,
                             remove_from_version_id=None):
        """Atomically moves `stage` onto one version and off the version holding it."""

    def begin_rotation(self, secret_id, version_id):
        """Stages `version_id` as PENDING before any value exists for it.

        Only needed by stores whose platform does not do this when it starts
        a rotation.
        """
        raise NotImplementedError(
            f"{type(self).__name__} does not support starting a rotation for {secret_id}")
