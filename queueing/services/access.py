"""
IP allow-list evaluation for administrative pages.

Rules are plain strings: an exact address (``10.0.0.7``), a wildcard with
one ``*`` per octet (``192.168.1.*``) or an IPv4 CIDR block
(``192.168.1.0/24``). An empty rule list means no restriction is configured.
"""
from __future__ import annotations

import ipaddress
import logging
import re
from typing import Iterable, Optional

from django.conf import settings

logger = logging.getLogger(__name__)

RULE_SEPARATORS = re.compile(r'[,;\n]')
LOOPBACK_ALIASES = {'::1', '::ffff:127.0.0.1'}


def parse_rules(values: Iterable[Optional[str]]) -> list[str]:
    """Split stored setting values into individual rules."""
    rules: list[str] = []
    for value in values:
        if not value:
            continue
        rules.extend(r.strip() for r in RULE_SEPARATORS.split(value) if r.strip())
    return rules


def _ipv4(address: str) -> Optional[ipaddress.IPv4Address]:
    try:
        return ipaddress.IPv4Address(address)
    except ValueError:
        return None


def match_wildcard(address: str, pattern: str) -> bool:
    segments = address.split('.')
    tokens = pattern.split('.')
    if len(segments) != len(tokens):
        return False
    for segment, token in zip(segments, tokens):
        if token == '*':
            if not segment.isdigit():
                return False
        elif segment != token:
            return False
    return True


def match_cidr(address: str, cidr: str) -> bool:
    ip = _ipv4(address)
    try:
        network = ipaddress.IPv4Network(cidr, strict=False)
    except ValueError:
        return False
    return ip is not None and ip in network


def match_rule(address: str, rule: str) -> bool:
    if address == rule:
        return True
    if '*' in rule:
        return match_wildcard(address, rule)
    if '/' in rule:
        return match_cidr(address, rule)
    return False


def is_allowed(client_address: Optional[str], rules: list[str]) -> bool:
    if not rules:
        return True
    if not client_address:
        return False
    return any(match_rule(client_address, rule) for rule in rules)


def normalize_ip(address: str) -> str:
    address = address.strip()
    if address in LOOPBACK_ALIASES:
        return '127.0.0.1'
    if address.startswith('::ffff:') and _ipv4(address[7:]) is not None:
        return address[7:]
    return address


def client_ip(request) -> Optional[str]:
    """Best-effort client address of a Django request."""
    address = None
    if getattr(settings, 'TRUST_X_FORWARDED_FOR', False):
        forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
        if forwarded:
            address = forwarded.split(',')[0]
    if not address:
        address = request.META.get('REMOTE_ADDR')
    return normalize_ip(address) if address else None


def check_admin_access(address: Optional[str], rules: list[str]) -> dict:
    if not address:
        return {'allowed': False, 'clientIp': None,
                'message': 'Unable to determine the client IP address'}
    allowed = is_allowed(address, rules)
    if not allowed:
        logger.warning('IP %s is not in the allowed list', address)
        return {'allowed': False, 'clientIp': address,
                'message': f'Access denied: IP address {address} may not open admin pages'}
    return {'allowed': True, 'clientIp': address, 'message': ''}
