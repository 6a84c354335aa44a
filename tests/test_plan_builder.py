"""Tests for adforge.plan_builder."""

from adforge.models import DeploymentConfig
from adforge.plan_builder import NSG_RULE_RDP, NSG_RULE_VNET, PlanBuilder, resource_id
from adforge.scripts import REDACTED

EXPECTED_STEPS = [
    ('resource_groups.create_or_update', 'rg-adforge'),
    ('virtual_networks.begin_create_or_update', 'vnet-adforge'),
    ('network_security_groups.begin_create_or_update', 'nsg-adforge'),
    ('public_ip_addresses.begin_create_or_update', 'pip-DC01'),
    ('network_interfaces.begin_create_or_update', 'nic-DC01'),
    ('virtual_machines.begin_create_or_update', 'DC01'),
    ('public_ip_addresses.begin_create_or_update', 'pip-DC02'),
    ('network_interfaces.begin_create_or_update', 'nic-DC02'),
    ('virtual_machines.begin_create_or_update', 'DC02'),
    ('virtual_machines.begin_run_command', 'DC01'),
    ('virtual_machines.begin_run_command', 'DC02'),
    ('virtual_networks.begin_create_or_update', 'vnet-adforge'),
]


class TestResourceId:
    def test_child_resource(self):
        rid = resource_id('sub', 'rg', 'Microsoft.Network/virtualNetworks', 'vnet', 'subnets', 'snet')

        assert rid == (
            '/subscriptions/sub/resourceGroups/rg/providers/'
            'Microsoft.Network/virtualNetworks/vnet/subnets/snet'
        )


class TestPlanBuilder:
    def test_plan_order(self):
        plan = PlanBuilder(DeploymentConfig()).build()

        assert [(p['operation'], p['name']) for p in plan] == EXPECTED_STEPS
        assert [p['step'] for p in plan] == list(range(1, len(EXPECTED_STEPS) + 1))

    def test_nsg_rules(self):
        rules = PlanBuilder(DeploymentConfig()).network_security_group_parameters()['security_rules']

        rdp, vnet = rules
        assert (rdp['name'], rdp['priority'], rdp['protocol'], rdp['destination_port_range']) == (
            NSG_RULE_RDP, 1000, 'Tcp', '3389'
        )
        assert rdp['source_address_prefix'] == '*'
        assert (vnet['name'], vnet['priority']) == (NSG_RULE_VNET, 1010)
        assert vnet['source_address_prefix'] == vnet['destination_address_prefix'] == 'VirtualNetwork'

    def test_public_ip_is_static_standard(self):
        config = DeploymentConfig()
        body = PlanBuilder(config).public_ip_parameters(config.primary)

        assert body['public_ip_allocation_method'] == 'Static'
        assert body['sku'] == {'name': 'Standard'}

    def test_vnet_has_no_dns_until_final_step(self):
        plan = PlanBuilder(DeploymentConfig()).build()

        assert 'dhcp_options' not in plan[1]['parameters']
        assert plan[-1]['parameters'] == {'dhcp_options': {'dns_servers': ['10.0.1.4', '10.0.2.4']}}

    def test_passwords_redacted_and_ids_linked(self):
        plan = PlanBuilder(DeploymentConfig()).build(admin_username='corpadmin', subscription_id='sub')

        vm = plan[5]['parameters']
        assert vm['os_profile']['admin_username'] == 'corpadmin'
        assert vm['os_profile']['admin_password'] == REDACTED
        assert vm['network_profile']['network_interfaces'][0]['id'].endswith('/networkInterfaces/nic-DC01')

        nic = plan[4]['parameters']
        assert nic['ip_configurations'][0]['subnet']['id'].startswith('/subscriptions/sub/')
        assert nic['network_security_group']['id'].endswith('/networkSecurityGroups/nsg-adforge')

    def test_tags_applied(self):
        config = DeploymentConfig(tags=(('owner', 'lab'),))

        assert PlanBuilder(config).resource_group_parameters() == {
            'location': 'eastus',
            'tags': {'owner': 'lab'},
        }
