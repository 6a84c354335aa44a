"""Shared pytest fixtures."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from adforge import scripts
from adforge.models import DeploymentConfig, DeploymentCredentials

SUBSCRIPTION = '00000000-0000-0000-0000-000000000000'
PUBLIC_IPS = {'pip-DC01': '20.1.1.1', 'pip-DC02': '20.2.2.2'}


def _poller(value):
    poller = MagicMock()
    poller.result.return_value = value
    return poller


def _run_result(stdout, stderr=''):
    return SimpleNamespace(value=[
        SimpleNamespace(code='ComponentStatus/StdOut/succeeded', message=stdout),
        SimpleNamespace(code='ComponentStatus/StdErr/succeeded', message=stderr),
    ])


def _rid(kind, name):
    return f"/subscriptions/{SUBSCRIPTION}/resourceGroups/rg-adforge/providers/{kind}/{name}"


class FakeAzure:
    """MagicMock-backed management clients that answer like Azure would."""

    def __init__(self):
        self.clients = MagicMock()
        self.forest_stdout = scripts.FOREST_PROMOTED_MARKER
        self.replica_stdout = scripts.REPLICA_PROMOTED_MARKER
        self.dns_ready = True
        self.scripts = []

        network = self.clients.network
        network.virtual_networks.begin_create_or_update.side_effect = self._create_vnet
        network.virtual_networks.get.side_effect = lambda rg, name: SimpleNamespace(
            name=name, dhcp_options=None
        )
        network.network_security_groups.begin_create_or_update.side_effect = (
            lambda rg, name, body: _poller(SimpleNamespace(id=_rid('Microsoft.Network/networkSecurityGroups', name)))
        )
        network.public_ip_addresses.begin_create_or_update.side_effect = (
            lambda rg, name, body: _poller(SimpleNamespace(id=_rid('Microsoft.Network/publicIPAddresses', name)))
        )
        network.network_interfaces.begin_create_or_update.side_effect = (
            lambda rg, name, body: _poller(SimpleNamespace(id=_rid('Microsoft.Network/networkInterfaces', name)))
        )
        network.public_ip_addresses.get.side_effect = lambda rg, name: SimpleNamespace(
            name=name, ip_address=PUBLIC_IPS[name]
        )
        self.clients.compute.virtual_machines.begin_create_or_update.side_effect = (
            lambda rg, name, body: _poller(SimpleNamespace(id=_rid('Microsoft.Compute/virtualMachines', name)))
        )
        self.clients.compute.virtual_machines.begin_run_command.side_effect = self._run_command

    def _create_vnet(self, rg, name, body):
        if isinstance(body, dict):
            subnets = [
                SimpleNamespace(
                    name=s['name'],
                    id=_rid('Microsoft.Network/virtualNetworks', f"{name}/subnets/{s['name']}"),
                )
                for s in body['subnets']
            ]
            return _poller(SimpleNamespace(id=_rid('Microsoft.Network/virtualNetworks', name), subnets=subnets))
        return _poller(body)

    def _run_command(self, rg, vm_name, parameters):
        script = "\n".join(parameters.script)
        self.scripts.append((vm_name, script))
        if 'Install-ADDSForest' in script:
            return _poller(_run_result(self.forest_stdout))
        if 'Install-ADDSDomainController' in script:
            return _poller(_run_result(self.replica_stdout))
        stdout = scripts.DNS_READY_MARKER if self.dns_ready else 'DNS not ready: timeout'
        return _poller(_run_result(stdout))

    def operations(self):
        """Names of the client methods called, in order."""
        return [name for name, _args, _kwargs in self.clients.mock_calls if '()' not in name]


@pytest.fixture
def fake_azure():
    return FakeAzure()


@pytest.fixture
def config():
    return DeploymentConfig(confirm_each_step=False)


@pytest.fixture
def credentials():
    return DeploymentCredentials(
        admin_username='labadmin',
        admin_password='Adm1n-P@ss',
        domain_admin_password='D0main-P@ss',
        safe_mode_password="Dsrm-P@ss'1",
    )


@pytest.fixture
def config_file(tmp_path):
    """Write a configuration file and return its path."""
    path = tmp_path / 'lab.yaml'
    path.write_text(
        "resource_group: rg-test\n"
        "location: westeurope\n"
        "domain:\n"
        "  fqdn: corp.example.com\n"
        "network:\n"
        "  address_space: 10.10.0.0/16\n"
        "  subnets:\n"
        "    - name: snet-a\n"
        "      address_prefix: 10.10.1.0/24\n"
        "    - name: snet-b\n"
        "      address_prefix: 10.10.2.0/24\n"
        "domain_controllers:\n"
        "  primary:\n"
        "    name: ADC01\n"
        "    subnet: snet-a\n"
        "    private_ip: 10.10.1.10\n"
        "  replica:\n"
        "    name: ADC02\n"
        "    subnet: snet-b\n"
        "    private_ip: 10.10.2.10\n"
        "credentials:\n"
        "  admin_username: corpadmin\n"
        "strict_replica_join: true\n"
        "tags:\n"
        "  owner: lab\n"
    )
    return path
