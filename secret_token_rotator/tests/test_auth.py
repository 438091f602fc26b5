# -*- coding: utf-8 -*-
"""
Tests for the auth service client, the local token check and the balance probe.

"""

import json
import logging
import unittest
from datetime import timedelta
from unittest import mock

import requests

from secret_token_rotator import *
from secret_token_rotator.tests.fakes import login_secret_value, make_token

SERVER = "https://auth.example.com/"
USER = {"email": "rotator@example.com",
        "apiLevel": 40,
        "apiToken": "existing-api-token",
        "bchAddr": "bitcoincash:qz0000000000000000000000000000000000000000"}


def setup_module():
    logging.basicConfig(level=logging.DEBUG)


def make_response(status_code, body):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body).encode("utf-8")
    response.url = SERVER
    return response


class TestCheckToken(unittest.TestCase):
    def test_valid_token(self):
        self.assertEqual(check_token(make_token(1)), TokenValidation(True))

    def test_expired_token(self):
        result = check_token(make_token(1, expires_in=-timedelta(minutes=5)))
        self.assertFalse(result.is_valid)
        self.assertEqual(result.reason, "api token has expired")

    def test_malformed_token(self):
        result = check_token("not-a-jwt")
        self.assertFalse(result.is_valid)
        self.assertTrue(result.reason.startswith("api token is malformed"))

    def test_missing_token(self):
        self.assertEqual(check_token(None), TokenValidation(False, "no api token"))


class TestAuthLogin(unittest.TestCase):
    def test_from_secret(self):
        login = AuthLogin.from_secret(login_secret_value())
        self.assertEqual(login, AuthLogin("rotator@example.com", "hunter2"))


class TestFullstackAuthClient(unittest.TestCase):
    def setUp(self):
        self.session = mock.MagicMock()
        self.client = FullstackAuthClient(SERVER,
                                          AuthLogin("rotator@example.com", "hunter2"),
                                          session=self.session,
                                          timeout=10.0)

    def test_register_existing_user(self):
        self.session.post.return_value = make_response(200, {"token": "login-jwt",
                                                             "user": USER})
        self.assertTrue(self.client.register())

        self.session.post.assert_called_once_with(
            "https://auth.example.com/api/auth",
            json={"email": "rotator@example.com", "password": "hunter2"},
            headers={},
            timeout=10.0)
        self.assertEqual(self.client.user_data,
                         UserData(email="rotator@example.com",
                                  api_level=40,
                                  api_token="existing-api-token",
                                  account=USER["bchAddr"]))

    def test_register_creates_unknown_user(self):
        self.session.post.side_effect = [
            make_response(401, {"error": "unauthorized"}),
            make_response(200, {"token": "login-jwt", "user": USER}),
        ]
        self.assertTrue(self.client.register())

        url = self.session.post.call_args_list[1].args[0]
        body = self.session.post.call_args_list[1].kwargs["json"]
        self.assertEqual(url, "https://auth.example.com/api/users")
        self.assertEqual(body["user"]["email"], "rotator@example.com")

    def test_register_rejected(self):
        self.session.post.side_effect = [
            make_response(401, {"error": "unauthorized"}),
            make_response(422, {"error": "email already in use"}),
        ]
        self.assertFalse(self.client.register())

    def test_register_transport_error_propagates(self):
        self.session.post.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(requests.ConnectionError):
            self.client.register()

    def test_get_api_token(self):
        new_token = make_token(2)
        self.session.post.side_effect = [
            make_response(200, {"token": "login-jwt", "user": USER}),
            make_response(200, {"apiToken": new_token}),
        ]
        self.client.register()

        self.assertEqual(self.client.get_api_token(40), new_token)
        self.session.post.assert_called_with(
            "https://auth.example.com/api/apitoken/new",
            json={"apiLevel": 40},
            headers={"Authorization": "Bearer login-jwt"},
            timeout=10.0)
        self.assertEqual(self.client.user_data.api_token, new_token)
        self.assertTrue(self.client.validate_api_token().is_valid)


class TestBlockbookBalanceProbe(unittest.TestCase):
    def setUp(self):
        self.session = mock.MagicMock()
        self.probe = BlockbookBalanceProbe("https://api.example.com/v5/", session=self.session)

    def test_balance(self):
        self.session.get.return_value = make_response(
            200, {"balance": "1500", "unconfirmedBalance": "-500"})

        result = self.probe.check_account(USER["bchAddr"], "api-token")

        self.assertEqual(result, ProbeResult(True, {"balance": 1000}))
        self.session.get.assert_called_once_with(
            f"https://api.example.com/v5/blockbook/balance/{USER['bchAddr']}",
            headers={"authorization": "Token api-token"},
            timeout=None)

    def test_rejected_token(self):
        self.session.get.return_value = make_response(401, {"error": "invalid token"})
        result = self.probe.check_account(USER["bchAddr"], "api-token")
        self.assertEqual(result, ProbeResult(False, {"status": 401}))

    def test_server_error_raises(self):
        self.session.get.return_value = make_response(503, {"error": "unavailable"})
        with self.assertRaises(requests.HTTPError):
            self.probe.check_account(USER["bchAddr"], "api-token")


if __name__ == '__main__':
    unittest.main()
