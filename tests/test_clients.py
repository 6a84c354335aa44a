"""Tests for adforge.clients."""

from unittest.mock import MagicMock, patch

import pytest

from adforge.clients import AzureClients
from adforge.exceptions import ConfigurationError


class TestAzureClients:
    def test_missing_subscription(self, monkeypatch):
        monkeypatch.delenv('AZURE_SUBSCRIPTION_ID', raising=False)

        clients = AzureClients(credential=MagicMock())

        with pytest.raises(ConfigurationError, match='AZURE_SUBSCRIPTION_ID'):
            clients.network

    def test_subscription_from_environment(self, monkeypatch):
        monkeypatch.setenv('AZURE_SUBSCRIPTION_ID', 'env-sub')

        assert AzureClients().subscription_id == 'env-sub'

    @patch('adforge.clients.ComputeManagementClient')
    def test_clients_created_once(self, compute_cls):
        credential = MagicMock()
        clients = AzureClients('sub', credential=credential)

        assert clients.compute is clients.compute
        compute_cls.assert_called_once_with(credential, 'sub')
