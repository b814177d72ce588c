"""Tests for the individual document transforms."""

from __future__ import annotations

from operator_config.migration.transforms import (
    convert_client_modes,
    merge_checkpoint_sync_urls,
    rename_legacy_sections,
    split_metrics_section,
)


class TestRenameLegacySections:
    """Old common section names."""

    def test_rename(self) -> None:
        """Legacy sections move to their new names."""
        document = {"execution": {"httpPort": "1"}, "consensus": {"graffiti": "g"}}
        rename_legacy_sections(document)
        assert document == {
            "executionCommon": {"httpPort": "1"},
            "consensusCommon": {"graffiti": "g"},
        }

    def test_new_values_win(self) -> None:
        """Entries already under the new name are kept."""
        document = {
            "execution": {"httpPort": "1", "wsPort": "2"},
            "executionCommon": {"httpPort": "3"},
        }
        rename_legacy_sections(document)
        assert document == {"executionCommon": {"httpPort": "3", "wsPort": "2"}}


class TestConvertClientModes:
    """External-client flags become modes."""

    def test_flags_to_modes(self) -> None:
        """true means external, false means local."""
        document = {
            "root": {"useExternalExecutionClient": "true", "useExternalConsensusClient": "false"}
        }
        convert_client_modes(document)
        assert document["root"] == {
            "executionClientMode": "external",
            "consensusClientMode": "local",
            "isNative": "false",
        }

    def test_unreadable_flag_is_dropped(self) -> None:
        """A garbled flag falls back to the default mode."""
        document = {"root": {"useExternalExecutionClient": "sometimes"}}
        convert_client_modes(document)
        assert document["root"] == {"isNative": "false"}

    def test_existing_mode_wins(self) -> None:
        """A mode already present is not overwritten."""
        document = {
            "root": {
                "useExternalExecutionClient": "true",
                "executionClientMode": "local",
                "isNative": "true",
            }
        }
        convert_client_modes(document)
        assert document["root"] == {"executionClientMode": "local", "isNative": "true"}


class TestSplitMetricsSection:
    """The single metrics section is distributed."""

    def test_split(self) -> None:
        """Each legacy key lands in its service section; unknown keys are dropped."""
        document = {
            "metrics": {
                "grafanaPort": "3200",
                "prometheusOpenPort": "true",
                "exporterRootFs": "true",
                "retired": "x",
            },
            "grafana": {"port": "3300"},
        }
        split_metrics_section(document)
        assert document == {
            "grafana": {"port": "3300"},
            "prometheus": {"openPort": "true"},
            "exporter": {"enableRootFs": "true"},
        }

    def test_no_metrics_section(self) -> None:
        """Documents without the legacy section are left alone."""
        document = {"grafana": {"port": "1"}}
        split_metrics_section(document)
        assert document == {"grafana": {"port": "1"}}


class TestMergeCheckpointSyncUrls:
    """Per-client checkpoint URLs collapse into the common settings."""

    def test_selected_client_url_is_kept(self) -> None:
        """The URL of the selected client becomes the common URL."""
        document = {
            "root": {"consensusClient": "teku"},
            "lighthouse": {"checkpointSyncUrl": "https://lh", "maxPeers": "80"},
            "teku": {"checkpointSyncUrl": "https://teku"},
        }
        merge_checkpoint_sync_urls(document)
        assert document["consensusCommon"] == {"checkpointSyncUrl": "https://teku"}
        assert document["lighthouse"] == {"maxPeers": "80"}
        assert document["teku"] == {}

    def test_common_url_wins(self) -> None:
        """An existing common URL is kept."""
        document = {
            "root": {"consensusClient": "prysm"},
            "consensusCommon": {"checkpointSyncUrl": "https://common"},
            "prysm": {"checkpointSyncUrl": "https://prysm"},
        }
        merge_checkpoint_sync_urls(document)
        assert document["consensusCommon"] == {"checkpointSyncUrl": "https://common"}
        assert document["prysm"] == {}

    def test_unselected_client_url_is_dropped(self) -> None:
        """URLs of clients that are not selected are discarded."""
        document = {
            "root": {"consensusClient": "nimbus"},
            "lighthouse": {"checkpointSyncUrl": "https://lh"},
        }
        merge_checkpoint_sync_urls(document)
        assert document["lighthouse"] == {}
        assert document["consensusCommon"] == {}
