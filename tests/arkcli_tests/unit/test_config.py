"""Tests for network profile registry and resolution."""

from dataclasses import FrozenInstanceError

import pytest

from arkcli.core.config import NETWORKS, network_names, resolve_network
from arkcli.core.exceptions import ArkCliError, ConfigurationError


class TestResolveNetwork:
    def test_mainnet_parameters(self):
        profile = resolve_network("mainnet")
        assert profile.name == "mainnet"
        assert profile.version == 0x17
        assert profile.slip44 == 111
        assert profile.nethash.startswith("6e84d08b")
        assert profile.seed_peers

    def test_devnet_parameters(self):
        profile = resolve_network("devnet")
        assert profile.version == 0x1E
        assert profile.slip44 == 1
        assert profile.token == "DARK"

    def test_name_is_case_insensitive(self):
        assert resolve_network(" MainNet ") is NETWORKS["mainnet"]

    def test_unknown_network_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_network("testnet-42")
        assert "testnet-42" in str(exc_info.value)
        assert exc_info.value.details["known"] == ["devnet", "mainnet"]
        assert isinstance(exc_info.value, ArkCliError)

    def test_profiles_are_immutable(self):
        with pytest.raises(FrozenInstanceError):
            NETWORKS["mainnet"].version = 0x1E  # type: ignore[misc]


def test_network_names_sorted():
    assert network_names() == ["devnet", "mainnet"]
