"""Tests for adforge.credentials."""

from unittest.mock import MagicMock

import pytest

from adforge import credentials as credentials_module
from adforge.credentials import prompt_password, resolve_credentials
from adforge.exceptions import CredentialPromptCancelled
from adforge.models import DeploymentCredentials


class TestResolveCredentials:
    def test_section_password_fills_every_slot(self):
        prompt = MagicMock()

        creds = resolve_credentials({'admin_password': 'S3cret!'}, environ={}, prompt=prompt)

        assert creds == DeploymentCredentials.shared('labadmin', 'S3cret!')
        prompt.assert_not_called()

    def test_environment_lookup(self):
        environ = {
            'ADFORGE_ADMIN_PASSWORD': 'env-admin',
            'ADFORGE_SAFE_MODE_PASSWORD': 'env-dsrm',
        }

        creds = resolve_credentials({'admin_username': 'corpadmin'}, environ=environ, prompt=MagicMock())

        assert creds.admin_username == 'corpadmin'
        assert creds.admin_password == 'env-admin'
        assert creds.domain_admin_password == 'env-admin'
        assert creds.safe_mode_password == 'env-dsrm'

    def test_separate_slots_from_section(self):
        section = {
            'admin_password': 'a',
            'domain_admin_password': 'b',
            'safe_mode_password': 'c',
        }

        creds = resolve_credentials(section, environ={})

        assert (creds.admin_password, creds.domain_admin_password, creds.safe_mode_password) == ('a', 'b', 'c')

    def test_prompts_when_nothing_configured(self):
        prompt = MagicMock(return_value='typed')

        creds = resolve_credentials(username='ops', environ={}, prompt=prompt)

        prompt.assert_called_once_with('ops')
        assert creds.admin_password == 'typed'

    def test_prompt_cancellation_propagates(self):
        prompt = MagicMock(side_effect=CredentialPromptCancelled('cancelled'))

        with pytest.raises(CredentialPromptCancelled):
            resolve_credentials(environ={}, prompt=prompt)

    def test_passwords_not_in_repr(self):
        assert 'S3cret!' not in repr(DeploymentCredentials.shared('labadmin', 'S3cret!'))


class TestPromptPassword:
    def test_keyboard_interrupt(self, monkeypatch):
        monkeypatch.setattr(credentials_module.getpass, 'getpass', MagicMock(side_effect=KeyboardInterrupt))

        with pytest.raises(CredentialPromptCancelled):
            prompt_password('labadmin')

    def test_empty_answer(self, monkeypatch):
        monkeypatch.setattr(credentials_module.getpass, 'getpass', MagicMock(return_value=''))

        with pytest.raises(CredentialPromptCancelled):
            prompt_password('labadmin')

    def test_answer_returned(self, monkeypatch):
        monkeypatch.setattr(credentials_module.getpass, 'getpass', MagicMock(return_value='pw'))

        assert prompt_password('labadmin') == 'pw'
