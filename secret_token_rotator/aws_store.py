# -*- coding: utf-8 -*-
"""AWS Secrets Manager as a staged secret store."""

import logging

import boto3

from .stores import CURRENT, PENDING, PREVIOUS, SecretMetadata, SecretStore

AWS_STAGES = {CURRENT: "AWSCURRENT",
              PENDING: "AWSPENDING",
              PREVIOUS: "AWSPREVIOUS"}
STAGES_FROM_AWS = {value: key for key, value in AWS_STAGES.items()}


class AWSSecretStore(SecretStore):
    """A `SecretStore` backed by AWS Secrets Manager.

    Secrets Manager stages AWSPENDING on the rotation token itself when a rotation
    starts, so `begin_rotation` is left unsupported. Labels other than the three
    rotation stages are passed through untouched.
    """

    def __init__(self, endpoint=None, client=None):
        if client is None:
            client = boto3.client("secretsmanager", endpoint_url=endpoint)
        self._client = client
        self.NOT_FOUND_EXCEPTIONS = (client.exceptions.ResourceNotFoundException,)

    @staticmethod
    def _aws_stage(stage):
        return AWS_STAGES.get(stage, stage)

    def describe_secret(self, secret_id):
        metadata = self._client.describe_secret(SecretId=secret_id)
        versions = {}
        for version_id, stages in metadata.get("VersionIdsToStages", {}).items():
            versions[version_id] = {STAGES_FROM_AWS.get(stage, stage) for stage in stages}
        return SecretMetadata(secret_id=secret_id,
                              rotation_enabled=bool(metadata.get("RotationEnabled")),
                              versions=versions)

    def get_secret_value(self, secret_id, version_id=None, stage=None):
        kwargs = {"SecretId": secret_id}
        if version_id is not None:
            kwargs["VersionId"] = version_id
        if stage is not None:
            kwargs["VersionStage"] = self._aws_stage(stage)
        response = self._client.get_secret_value(**kwargs)
        if "SecretString" in response:
            return response["SecretString"]
        return response["SecretBinary"].decode("utf-8")

    def put_secret_value(self, secret_id, version_id, value, stages):
        self._client.put_secret_value(SecretId=secret_id,
                                      ClientRequestToken=version_id,
                                      SecretString=value,
                                      VersionStages=[self._aws_stage(stage) for stage in stages])
        logging.getLogger(__name__).info(
            f"Added version {version_id} of {secret_id} stages {sorted(stages)}")

    def update_version_stage(self, secret_id, stage, move_to_version_id,
                             remove_from_version_id=None):
        kwargs = {"SecretId": secret_id,
                  "VersionStage": self._aws_stage(stage)}
        if move_to_version_id is not None:
            kwargs["MoveToVersionId"] = move_to_version_id
        if remove_from_version_id is not None:
            kwargs["RemoveFromVersionId"] = remove_from_version_id
        self._client.update_secret_version_stage(**kwargs)
        logging.getLogger(__name__).info(
            f"Moved {stage} of {secret_id} from {remove_from_version_id} to {move_to_version_id}")
