"""Tests for the execution client sections."""

from __future__ import annotations

import pytest

from operator_config.sections import (
    ExecutionCommonSection,
    ExternalExecutionSection,
    GethSection,
    InfuraSection,
    PocketSection,
)
from operator_config.sections.execution import (
    besu_heap_size,
    default_max_peers,
    geth_cache_size,
    nethermind_memory_size,
)
from operator_config.types import (
    ConsensusClient,
    ConstraintViolationError,
    ContainerID,
    Network,
)


class TestMemoryDefaults:
    """Memory-aware defaults."""

    @pytest.mark.parametrize("memory, cache", [(0, 0), (4, 256), (8, 256), (12, 2048), (32, 4096)])
    def test_geth_cache(self, memory: int, cache: int) -> None:
        """Geth's cache grows with system memory."""
        assert geth_cache_size(memory) == cache

    @pytest.mark.parametrize("memory, size", [(0, 0), (8, 512), (16, 2048), (32, 6144), (64, 8192)])
    def test_nethermind_memory(self, memory: int, size: int) -> None:
        """Nethermind's cache grows with system memory."""
        assert nethermind_memory_size(memory) == size

    def test_besu_heap(self) -> None:
        """Small machines get a fixed heap; larger ones let Besu decide."""
        assert besu_heap_size(8) == 512
        assert besu_heap_size(16) == 0

    def test_arm_boards_get_fewer_peers(self) -> None:
        """ARM machines default to fewer peers."""
        assert default_max_peers("arm64") < default_max_peers("amd64")


class TestFallbackVariants:
    """Primary and fallback instances of the same section."""

    def test_fallback_env_vars_are_prefixed(self) -> None:
        """Fallback settings export under FALLBACK_ names."""
        primary = ExecutionCommonSection()
        fallback = ExecutionCommonSection(is_fallback=True)
        assert primary.http_port.env_vars == ("EC_HTTP_PORT",)
        assert fallback.http_port.env_vars == ("FALLBACK_EC_HTTP_PORT",)

    def test_fallback_affects_fallback_container(self) -> None:
        """Fallback settings restart the fallback container only."""
        infura = InfuraSection(is_fallback=True)
        assert infura.project_id.affected_containers == frozenset({ContainerID.ETH1_FALLBACK})

    def test_titles_are_distinct(self) -> None:
        """Change sets can tell the two variants apart."""
        assert PocketSection().title != PocketSection(is_fallback=True).title
        assert (
            ExternalExecutionSection().title != ExternalExecutionSection(is_fallback=True).title
        )

    def test_same_ids_for_both_variants(self) -> None:
        """Both variants persist under the same parameter ids."""
        assert [p.id for p in InfuraSection().parameters()] == [
            p.id for p in InfuraSection(is_fallback=True).parameters()
        ]


class TestClients:
    """Client-specific metadata and constraints."""

    def test_geth_stops_with_sigint(self) -> None:
        """Geth needs SIGINT to shut down cleanly."""
        assert GethSection.stop_signal == "SIGINT"
        assert InfuraSection.stop_signal == "SIGTERM"

    def test_pocket_has_no_websocket(self) -> None:
        """Pocket ignores the websocket port and cannot serve Nimbus."""
        assert "wsPort" in PocketSection.unsupported_common_params
        assert ConsensusClient.NIMBUS not in PocketSection.compatible_consensus_clients

    def test_pocket_gateway_default_per_network(self) -> None:
        """Each network has its own default gateway."""
        pocket = PocketSection()
        mainnet = pocket.gateway_id.resolve_default(Network.MAINNET)
        prater = pocket.gateway_id.resolve_default(Network.PRATER)
        assert mainnet != prater
        assert pocket.gateway_id.value == mainnet

    def test_infura_project_id_format(self) -> None:
        """Project ids are 32 hex characters."""
        infura = InfuraSection()
        assert infura.project_id.parse("0123456789abcdef0123456789abcdef")
        with pytest.raises(ConstraintViolationError):
            infura.project_id.parse("not-a-project")

    def test_container_tags_track_upgrades(self) -> None:
        """Container tags are reset on upgrade; user flags are not."""
        geth = GethSection()
        assert geth.container_tag.overwrite_on_upgrade
        assert not geth.additional_flags.overwrite_on_upgrade
        assert geth.additional_flags.can_be_blank
