# -*- coding: utf-8 -*-
"""
Rotation configuration.

Values come from the environment. If ROTATION_CONFIG_BUCKET and ROTATION_CONFIG_OBJECT
are both set the named object is read from Cloud Storage as utf-8 json and its keys,
named as the fields below, override the environment.

SECRET_STORE_BACKEND     gcp (default) or aws
SECRET_STORE_ENDPOINT    api endpoint override for the secret store
AUTH_SERVICE_URL         base url of the auth service that mints tokens (required)
AUTH_CREDENTIALS_SECRET  secret holding the auth service login (required)
PROBE_API_URL            base url of the api used to probe a new token, no probe if unset
HTTP_TIMEOUT_SECONDS     timeout for auth service and probe requests, none if unset

SECRETS_MANAGER_ENDPOINT, FULLSTACK_AUTH_URL, BCH_JS_CREDENTIALS_ARN and FULLSTACK_API_URL are
read as the endpoint, auth service url, credentials secret and probe url when the names
above are not set. A credentials secret given as an AWS arn selects the aws backend unless
SECRET_STORE_BACKEND says otherwise.
"""

import json
import logging
import os
from dataclasses import dataclass, fields

from google.cloud import storage

from .exceptions import ConfigurationError

ENVIRONMENT = {"store_backend": "SECRET_STORE_BACKEND",
               "store_endpoint": "SECRET_STORE_ENDPOINT",
               "auth_service_url": "AUTH_SERVICE_URL",
               "auth_credentials_secret": "AUTH_CREDENTIALS_SECRET",
               "probe_api_url": "PROBE_API_URL",
               "http_timeout": "HTTP_TIMEOUT_SECONDS"}

# names used by existing AWS Lambda deployments of the rotation function
LAMBDA_ENVIRONMENT = {"store_endpoint": "SECRETS_MANAGER_ENDPOINT",
                      "auth_service_url": "FULLSTACK_AUTH_URL",
                      "auth_credentials_secret": "BCH_JS_CREDENTIALS_ARN",
                      "probe_api_url": "FULLSTACK_API_URL"}

BACKENDS = ("gcp", "aws")


@dataclass
class RotationConfig:
    auth_service_url: str = None
    auth_credentials_secret: str = None
    store_backend: str = "gcp"
    store_endpoint: str = None
    probe_api_url: str = None
    http_timeout: float = None

    def __post_init__(self):
        for option in ("auth_service_url", "auth_credentials_secret"):
            if not getattr(self, option):
                raise ConfigurationError(ENVIRONMENT[option])
        if self.store_backend not in BACKENDS:
            raise ConfigurationError(f"{ENVIRONMENT['store_backend']} as one of {BACKENDS}")
        if self.http_timeout is not None:
            self.http_timeout = float(self.http_timeout)

    @classmethod
    def from_env(cls, environ=None, _credentials=None):
        if environ is None:
            environ = os.environ

        values = {name: environ[var] for name, var in LAMBDA_ENVIRONMENT.items()
                  if environ.get(var)}
        values.update({name: environ[var] for name, var in ENVIRONMENT.items()
                       if environ.get(var)})
        if "store_backend" not in values and \
                values.get("auth_credentials_secret", "").startswith("arn:aws:"):
            values["store_backend"] = "aws"

        bucket = environ.get("ROTATION_CONFIG_BUCKET")
        blob_name = environ.get("ROTATION_CONFIG_OBJECT")
        if bucket and blob_name:
            known = {f.name for f in fields(cls)}
            overrides = load_config(bucket, blob_name, _credentials)
            values.update({k: v for k, v in overrides.items() if k in known})

        return cls(**values)


def load_config(bucket, blob_name, credentials=None):
    """Loads a JSON configuration object from Google Cloud Storage.

    Args:
        bucket (str): The name of the GCS bucket.
        blob_name (str): The name of the object in the bucket.
        credentials (google.auth.credentials.Credentials, optional): defaults apply if None.

    Returns:
        dict: The parsed JSON configuration.
    """
    logging.getLogger(__name__).info(f"Loading rotation config from gs://{bucket}/{blob_name}")
    client = storage.Client(credentials=credentials)
    bucket = client.get_bucket(bucket)
    blob = bucket.get_blob(blob_name)
    if blob is None:
        raise ConfigurationError(f"gs://{bucket.name}/{blob_name}")
    return json.loads(blob.download_as_bytes().decode("utf-8"))
