# -*- coding: utf-8 -*-

import json
import logging
import unittest
from unittest import mock

from secret_token_rotator import *
from secret_token_rotator import handler
from secret_token_rotator.tests.fakes import FakeAuthService, \
    FakeProbe, \
    InMemorySecretStore, \
    LOGIN_SECRET, \
    ROTATED_SECRET, \
    login_secret_value


def setup_module():
    logging.basicConfig(level=logging.DEBUG)


class TestHandlers(unittest.TestCase):
    def setUp(self):
        self.store = InMemorySecretStore()
        self.store.add_secret(LOGIN_SECRET, {"login-1": (login_secret_value(), {CURRENT})})
        self.store.add_secret(ROTATED_SECRET, {"v1": ("old-api-token", {CURRENT}),
                                               "v2": (None, {PENDING})})
        self.auth = FakeAuthService()
        self.config = RotationConfig(auth_service_url="https://auth.example.com",
                                     auth_credentials_secret=LOGIN_SECRET)
        self.coordinator = RotationCoordinator(self.store, self.config,
                                               auth_client_factory=self.auth.client_factory,
                                               probe=FakeProbe())

    def test_lambda_handler_runs_one_phase(self):
        event = {"SecretId": ROTATED_SECRET, "ClientRequestToken": "v2", "Step": "createSecret"}
        handler.lambda_handler(event, None, coordinator=self.coordinator)

        self.assertEqual(len(self.auth.minted), 1)
        self.assertEqual(self.store.secrets[ROTATED_SECRET]["stages"]["v2"], {PENDING})
        self.assertEqual(self.store.secrets[ROTATED_SECRET]["stages"]["v1"], {CURRENT})

    def test_lambda_handler_rejects_event_before_building(self):
        with mock.patch.object(handler, "build_coordinator") as build:
            with self.assertRaises(UnknownPhaseError):
                handler.lambda_handler({"SecretId": ROTATED_SECRET,
                                        "ClientRequestToken": "v2",
                                        "Step": "rotate"})
        build.assert_not_called()

    def test_rotate_secret_ignores_other_events(self):
        with self.assertLogs("secret_token_rotator.handler", level="WARNING"):
            token = handler.rotate_secret({"eventType": "SECRET_VERSION_ADD",
                                           "secretId": ROTATED_SECRET},
                                          json.dumps({"name": ROTATED_SECRET}).encode("utf-8"),
                                          coordinator=self.coordinator)
        self.assertIsNone(token)
        self.assertEqual(self.store.calls, [])

    def test_rotate_secret_runs_all_phases(self):
        data = json.dumps({"name": ROTATED_SECRET,
                           "rotation": {"rotationPeriod": "2592000s"}}).encode("utf-8")
        token = handler.rotate_secret({"eventType": "SECRET_ROTATE",
                                       "secretId": ROTATED_SECRET},
                                      data,
                                      coordinator=self.coordinator)

        stages = self.store.secrets[ROTATED_SECRET]["stages"]
        self.assertEqual(stages[token], {CURRENT})
        self.assertNotIn(CURRENT, stages["v1"])

    def test_build_coordinator(self):
        store_class = mock.MagicMock()
        config = RotationConfig(auth_service_url="https://auth.example.com",
                                auth_credentials_secret=LOGIN_SECRET,
                                store_backend="aws",
                                store_endpoint="http://localhost:4566",
                                probe_api_url="https://api.example.com/v5/")
        with mock.patch.dict(handler.STORES, {"aws": store_class}):
            coordinator = handler.build_coordinator(config)

        store_class.assert_called_once_with(endpoint="http://localhost:4566")
        self.assertIs(coordinator.store, store_class.return_value)
        self.assertIsInstance(coordinator.probe, BlockbookBalanceProbe)

    def test_build_coordinator_without_probe(self):
        with mock.patch.dict(handler.STORES, {"gcp": mock.MagicMock()}):
            coordinator = handler.build_coordinator(self.config)
        self.assertIsNone(coordinator.probe)


if __name__ == '__main__':
    unittest.main()
