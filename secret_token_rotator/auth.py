# -*- coding: utf-8 -*-
"""
Clients for the authentication service that mints the api tokens being rotated.

The service issues a login JWT for a username/password pair and, with it, long lived
api tokens at the account's api level. The login pair lives in a separate secret from
the token being rotated, as a utf-8 json object

{
    "username": "string",
    "password": "string"
}
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import jwt
import requests


@dataclass
class AuthLogin:
    username: str
    password: str

    @classmethod
    def from_secret(cls, secret_string):
        creds = json.loads(secret_string)
        return cls(username=creds["username"], password=creds["password"])


@dataclass
class UserData:
    email: str = None
    api_level: int = 0
    api_token: str = None
    account: str = None

    @classmethod
    def from_response(cls, user):
        return cls(email=user.get("email"),
                   api_level=user.get("apiLevel", 0),
                   api_token=user.get("apiToken"),
                   account=user.get("bchAddr"))


@dataclass
class TokenValidation:
    is_valid: bool
    reason: str = None


def check_token(token):
    """Checks an api token is a well formed JWT that has not expired.

    The signature is not verified, only the issuing service holds the key.

    Args:
        token (str): The api token.

    Returns:
        TokenValidation: with a reason when the token is not valid.
    """
    if not token:
        return TokenValidation(False, "no api token")
    try:
        jwt.decode(token,
                   options={"verify_signature": False,
                            "verify_exp": True})
    except jwt.ExpiredSignatureError:
        return TokenValidation(False, "api token has expired")
    except jwt.InvalidTokenError as e:
        return TokenValidation(False, f"api token is malformed: {e}")
    return TokenValidation(True)


class AuthClient(ABC):
    """Abstract Base Class for a client of the token issuing service."""

    @property
    @abstractmethod
    def user_data(self):
        """The `UserData` of the authenticated user."""

    @abstractmethod
    def register(self):
        """Authenticates, creating the user if it does not exist yet.

        Returns:
            bool: False when the service rejects the login.
        """

    @abstractmethod
    def get_api_token(self, level):
        """Mints a new api token at `level` and returns it."""

    def validate_api_token(self):
        """Validates the authenticated user's current api token locally."""
        return check_token(self.user_data.api_token)


class FullstackAuthClient(AuthClient):
    """An `AuthClient` for a jwt-bch style auth server.

    Args:
        server (str): base url of the auth server.
        login (AuthLogin): username (email) and password.
        session (requests.Session, optional): session to send requests with.
        timeout (float, optional): per request timeout in seconds.
    """

    def __init__(self, server, login, session=None, timeout=None):
        self._server = server.rstrip("/")
        self._login = login
        self._session = session or requests.Session()
        self._timeout = timeout
        self._jwt = None
        self._user_data = UserData()

    @property
    def user_data(self):
        return self._user_data

    @property
    def login(self):
        return self._login

    def _post(self, path, body, authenticated=False):
        headers = {}
        if authenticated:
            headers["Authorization"] = f"Bearer {self._jwt}"
        response = self._session.post(f"{self._server}{path}",
                                      json=body,
                                      headers=headers,
                                      timeout=self._timeout)
        response.raise_for_status()
        return response.json()

    def _authenticate(self):
        try:
            return self._post("/api/auth", {"email": self.login.username,
                                            "password": self.login.password})
        except requests.HTTPError as e:
            if e.response is None or e.response.status_code != 401:
                raise
        logging.getLogger(__name__).info(f"Creating auth service user {self.login.username}")
        return self._post("/api/users", {"user": {"email": self.login.username,
                                                  "password": self.login.password,
                                                  "name": self.login.username}})

    def register(self):
        logging.getLogger(__name__).info(
            f"Authenticating {self.login.username} with auth service at {self._server}")
        try:
            data = self._authenticate()
        except requests.HTTPError as e:
            logging.getLogger(__name__).warning(
                f"Auth service rejected {self.login.username}: {e}")
            return False

        self._jwt = data["token"]
        self._user_data = UserData.from_response(data["user"])
        return True

    def get_api_token(self, level):
        data = self._post("/api/apitoken/new", {"apiLevel": level}, authenticated=True)
        self._user_data.api_token = data["apiToken"]
        logging.getLogger(__name__).info(f"Minted new api token at level {level}")
        return data["apiToken"]
