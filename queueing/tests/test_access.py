import logging
from types import SimpleNamespace

import pytest

from queueing.services.access import (
    check_admin_access,
    client_ip,
    is_allowed,
    match_cidr,
    match_wildcard,
    normalize_ip,
    parse_rules,
)


@pytest.mark.parametrize('address,rules,expected', [
    ('192.168.1.37', ['192.168.1.0/24'], True),
    ('192.168.2.1', ['192.168.1.0/24'], False),
    ('10.1.2.3', ['10.*.*.*'], True),
    ('10.1.2', ['10.*.*.*'], False),
    ('172.16.0.5', ['172.16.0.5'], True),
    ('172.16.0.6', ['172.16.0.5', '10.0.0.0/8'], False),
    ('8.8.8.8', [], True),
    ('10.0.5.9', ['10.0.*.*'], True),
    ('10.1.5.9', ['10.0.*.*'], False),
    ('1.2.3.4', ['1.2.3.4'], True),
    ('1.2.3.5', ['1.2.3.4'], False),
    ('not-an-ip', ['10.0.0.0/8', '*.*.*.*'], False),
    ('not-an-ip', ['not-an-ip'], True),
    (None, ['10.0.0.0/8'], False),
])
def test_is_allowed(address, rules, expected):
    assert is_allowed(address, rules) is expected


def test_cidr_edges():
    assert match_cidr('1.2.3.4', '0.0.0.0/0')
    assert match_cidr('10.0.0.1', '10.0.0.1/32')
    assert not match_cidr('10.0.0.2', '10.0.0.1/32')
    assert not match_cidr('10.0.0.1', '10.0.0.0/33')
    assert not match_cidr('10.0.0.1', '10.0.0/8')
    assert not match_cidr('fe80::1', '10.0.0.0/8')


def test_cidr_with_host_bits_matches_the_whole_network():
    assert match_cidr('192.168.1.5', '192.168.1.77/24')
    assert not match_cidr('192.168.2.5', '192.168.1.77/24')
    assert not match_cidr('192.168.1.5', 'fe80::/10')
    assert not match_cidr('192.168.1.5', '192.168.1.0/-1')


def test_wildcard_needs_numeric_segment():
    assert match_wildcard('192.168.1.9', '192.168.*.9')
    assert not match_wildcard('192.168.x.9', '192.168.*.9')
    assert not match_wildcard('192.168.1.10', '192.168.*.9')


def test_parse_rules_splits_on_separators():
    assert parse_rules(['10.0.0.1, 10.0.0.2;10.0.0.3\n 192.168.*.*', None, '']) == [
        '10.0.0.1', '10.0.0.2', '10.0.0.3', '192.168.*.*',
    ]


def test_loopback_is_normalized():
    assert normalize_ip('::1') == '127.0.0.1'
    assert normalize_ip('::ffff:127.0.0.1') == '127.0.0.1'
    assert normalize_ip('::ffff:10.0.0.4') == '10.0.0.4'
    assert normalize_ip('fe80::1') == 'fe80::1'


def test_client_ip_ignores_forwarded_header_unless_trusted(settings):
    request = SimpleNamespace(META={'REMOTE_ADDR': '::1', 'HTTP_X_FORWARDED_FOR': '203.0.113.9, 10.0.0.1'})
    settings.TRUST_X_FORWARDED_FOR = False
    assert client_ip(request) == '127.0.0.1'
    settings.TRUST_X_FORWARDED_FOR = True
    assert client_ip(request) == '203.0.113.9'


def test_check_admin_access_reports_and_logs_denial(caplog):
    with caplog.at_level(logging.WARNING, logger='queueing.services.access'):
        result = check_admin_access('192.168.2.1', ['192.168.1.0/24'])
    assert result['allowed'] is False
    assert result['clientIp'] == '192.168.2.1'
    assert '192.168.2.1' in result['message']
    assert 'not in the allowed list' in caplog.text

    assert check_admin_access(None, [])['allowed'] is False
    assert check_admin_access('127.0.0.1', [])['allowed'] is True
