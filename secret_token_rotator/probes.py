# -*- coding: utf-8 -*-

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import requests


@dataclass
class ProbeResult:
    ok: bool
    detail: dict = field(default_factory=dict)


class ValidationProbe(ABC):
    """Abstract Base Class for a check that a token works against the real service."""

    @abstractmethod
    def check_account(self, identifier, token):
        """Uses `token` to query state tied to the account `identifier`.

        Returns:
            ProbeResult: ok is False when the service answered but the token did not work.
        """


class BlockbookBalanceProbe(ValidationProbe):
    """Checks a token by reading the balance of the account's address via bch-api blockbook."""

    def __init__(self, rest_url, session=None, timeout=None):
        self._rest_url = rest_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def check_account(self, identifier, token):
        response = self._session.get(f"{self._rest_url}/blockbook/balance/{identifier}",
                                     headers={"authorization": f"Token {token}"},
                                     timeout=self._timeout)
        if response.status_code in (401, 403, 429):
            return ProbeResult(False, {"status": response.status_code})
        response.raise_for_status()

        balance = response.json()
        real_balance = int(balance["balance"]) + int(balance["unconfirmedBalance"])
        logging.getLogger(__name__).info(
            f"Balance for account is {real_balance} satoshis at address {identifier}")
        return ProbeResult(True, {"balance": real_balance})
