"""Tests for iproute.installer: destination parsing and single-route installs."""

import errno
import os
from ipaddress import ip_address, ip_network

import pytest

from iproute.installer import RouteInstaller, parse_destination
from iproute.models import OutcomeKind

GATEWAY = ip_address("192.168.1.1")


class TestParseDestination:
    @pytest.mark.parametrize(
        ("text", "network", "prefix"),
        [
            ("10.0.0.0/24", "10.0.0.0/24", 24),
            ("10.0.0.5/24", "10.0.0.0/24", 24),
            ("10.0.0.1", "10.0.0.1/32", 32),
            ("0.0.0.0/0", "0.0.0.0/0", 0),
            ("2001:db8::/32", "2001:db8::/32", 32),
            ("2001:db8::1", "2001:db8::1/128", 128),
        ],
    )
    def test_valid(self, text: str, network: str, prefix: int) -> None:
        parsed = parse_destination(text)
        assert parsed == ip_network(network)
        assert parsed.prefixlen == prefix

    @pytest.mark.parametrize("text", ["not-an-ip", "", "10.0.0.0/33", "300.1.1.1", "10.0.0/24", " 10.0.0.1",
                                      "10.0.0.0/255.255.255.0", "10.0.0.0/024", "10.0.0.0/", "10.0.0.0/+8",
                                      "10.0.0.0/24/8"])
    def test_malformed(self, text: str) -> None:
        assert parse_destination(text) is None

    def test_non_string(self) -> None:
        assert parse_destination(None) is None  # type: ignore[arg-type]


class TestInstall:
    def test_success(self, fake_routes) -> None:
        outcome = RouteInstaller(fake_routes).install("10.1.0.0/16", GATEWAY, 7)

        assert outcome is OutcomeKind.SUCCESS
        [spec] = fake_routes.calls
        assert spec.destination == ip_network("10.1.0.0/16")
        assert spec.gateway == GATEWAY
        assert spec.interface_index == 7

    def test_malformed_never_reaches_kernel(self, fake_routes) -> None:
        outcome = RouteInstaller(fake_routes).install("not-an-ip", GATEWAY, 7)

        assert outcome is OutcomeKind.INVALID_ARGUMENT
        assert fake_routes.calls == []

    def test_existing_route(self, fake_routes) -> None:
        installer = RouteInstaller(fake_routes)

        assert installer.install("10.0.0.1", GATEWAY, 7) is OutcomeKind.SUCCESS
        assert installer.install("10.0.0.1", GATEWAY, 7) is OutcomeKind.ALREADY_EXISTS
        assert len(fake_routes.calls) == 2

    def test_kernel_error_is_classified(self, fake_routes) -> None:
        fake_routes.errors["10.9.0.0/16"] = OSError(errno.ENETUNREACH, os.strerror(errno.ENETUNREACH))

        outcome = RouteInstaller(fake_routes).install("10.9.0.0/16", GATEWAY, 7)

        assert outcome is OutcomeKind.NETWORK_UNREACHABLE

    def test_no_retry(self, fake_routes) -> None:
        fake_routes.errors["10.9.0.0/16"] = OSError(errno.EHOSTUNREACH, "No route to host")

        RouteInstaller(fake_routes).install("10.9.0.0/16", GATEWAY, 7)

        assert len(fake_routes.calls) == 1
