"""Tests for adforge.validator."""

import copy

import pytest

from adforge.validator import ConfigValidator

VALID = {
    'resource_group': 'rg-lab',
    'network': {
        'address_space': '10.0.0.0/16',
        'subnets': [
            {'name': 'snet-dc1', 'address_prefix': '10.0.1.0/24'},
            {'name': 'snet-dc2', 'address_prefix': '10.0.2.0/24'},
        ],
    },
    'domain_controllers': {
        'primary': {'name': 'DC01', 'subnet': 'snet-dc1', 'private_ip': '10.0.1.4'},
        'replica': {'name': 'DC02', 'subnet': 'snet-dc2', 'private_ip': '10.0.2.4'},
    },
    'strict_replica_join': True,
}


@pytest.fixture
def validator():
    return ConfigValidator()


def with_changes(**sections):
    config = copy.deepcopy(VALID)
    config.update(sections)
    return config


class TestValidConfigs:
    def test_empty_config_uses_valid_defaults(self, validator):
        is_valid, errors, warnings = validator.validate({})

        assert is_valid, errors
        assert any('strict_replica_join' in w for w in warnings)

    def test_full_config(self, validator):
        is_valid, errors, warnings = validator.validate(copy.deepcopy(VALID))

        assert is_valid, errors
        assert warnings == []


class TestSchema:
    def test_unknown_key_rejected(self, validator):
        is_valid, errors, _ = validator.validate(with_changes(bogus=1))

        assert not is_valid
        assert errors[0].startswith('Schema validation error at <root>')

    def test_error_names_the_path(self, validator):
        config = with_changes()
        config['domain_controllers']['replica']['private_ip'] = 'not-an-ip'

        is_valid, errors, _ = validator.validate(config)

        assert not is_valid
        assert 'domain_controllers.replica.private_ip' in errors[0]


class TestSemantics:
    def test_ip_outside_subnet(self, validator):
        config = with_changes()
        config['domain_controllers']['replica']['private_ip'] = '10.0.3.4'

        is_valid, errors, _ = validator.validate(config)

        assert not is_valid
        assert any('not in subnet range 10.0.2.0/24' in e for e in errors)

    def test_reserved_ip(self, validator):
        config = with_changes()
        config['domain_controllers']['primary']['private_ip'] = '10.0.1.1'

        is_valid, errors, _ = validator.validate(config)

        assert not is_valid
        assert any('reserved by Azure' in e for e in errors)

    def test_overlapping_subnets(self, validator):
        config = with_changes()
        config['network']['subnets'][1]['address_prefix'] = '10.0.1.128/25'
        config['domain_controllers']['replica']['private_ip'] = '10.0.1.140'

        is_valid, errors, _ = validator.validate(config)

        assert not is_valid
        assert any('overlapping' in e for e in errors)

    def test_subnet_outside_vnet(self, validator):
        config = with_changes()
        config['network']['subnets'][1]['address_prefix'] = '192.168.2.0/24'
        config['domain_controllers']['replica']['private_ip'] = '192.168.2.4'

        is_valid, errors, _ = validator.validate(config)

        assert not is_valid
        assert any('not within VNet range' in e for e in errors)

    def test_vm_name_too_long(self, validator):
        config = with_changes()
        config['domain_controllers']['primary']['name'] = 'DOMAINCONTROLLER01'

        is_valid, errors, _ = validator.validate(config)

        assert not is_valid
        assert any('15 character limit' in e for e in errors)

    def test_duplicate_names_case_insensitive(self, validator):
        config = with_changes()
        config['domain_controllers']['replica']['name'] = 'dc01'

        is_valid, errors, _ = validator.validate(config)

        assert not is_valid
        assert 'Duplicate VM name: DC01' in errors

    def test_unknown_subnet(self, validator):
        config = with_changes()
        config['domain_controllers']['replica']['subnet'] = 'snet-missing'

        is_valid, errors, _ = validator.validate(config)

        assert not is_valid
        assert any("non-existent subnet 'snet-missing'" in e for e in errors)

    def test_bad_fqdn(self, validator):
        is_valid, errors, _ = validator.validate(with_changes(domain={'fqdn': 'contoso'}))

        assert not is_valid
        assert 'Invalid domain FQDN format: contoso' in errors

    def test_netbios_too_long(self, validator):
        domain = {'fqdn': 'contoso.local', 'netbios': 'AVERYLONGNETBIOSNAME'}

        is_valid, errors, _ = validator.validate(with_changes(domain=domain))

        assert not is_valid
        assert any('NetBIOS' in e for e in errors)

    def test_readiness_bounds(self, validator):
        is_valid, errors, _ = validator.validate(
            with_changes(readiness={'max_attempts': 0, 'backoff_factor': 0.5})
        )

        assert not is_valid
        assert 'readiness.max_attempts must be at least 1' in errors
        assert 'readiness.backoff_factor must be at least 1' in errors
