"""Unit tests for contract artifact discovery and parsing."""

import json
from pathlib import Path

import pytest

from ocr_deployments.artifacts import (
    ArtifactFormat,
    detect_artifact_format,
    get_artifact_path,
    get_default_artifacts_dir,
    load_artifact,
    parse_artifact,
)
from ocr_deployments.exceptions import ArtifactNotFoundError, DefectiveArtifactError
from ocr_deployments.types import ContractKind

ABI = [{"type": "function", "name": "get", "inputs": [], "outputs": [{"name": "", "type": "uint256"}]}]


def write_artifact(path: Path, data) -> Path:
    path.write_text(json.dumps(data))
    return path


class TestDetectArtifactFormat:
    def test_hardhat(self):
        assert detect_artifact_format({"abi": ABI, "bytecode": "0x60"}) == ArtifactFormat.HARDHAT

    def test_foundry(self):
        data = {"abi": ABI, "bytecode": {"object": "0x60", "sourceMap": ""}}
        assert detect_artifact_format(data) == ArtifactFormat.FOUNDRY

    def test_plain(self):
        assert detect_artifact_format({"abi": ABI, "bin": "60"}) == ArtifactFormat.PLAIN

    def test_unknown(self):
        assert detect_artifact_format({"abi": ABI}) is None


class TestParseArtifact:
    """Test parsing each compiler output shape."""

    def test_hardhat_artifact(self, tmp_path: Path):
        path = write_artifact(
            tmp_path / "Store.json",
            {"contractName": "Store", "abi": ABI, "bytecode": "0x6080"},
        )
        artifact = parse_artifact(path)

        assert artifact.name == "Store"
        assert artifact.abi == ABI
        assert artifact.bytecode == "0x6080"
        assert artifact.source_format == "hardhat"

    def test_foundry_artifact(self, tmp_path: Path):
        path = write_artifact(
            tmp_path / "Store.json", {"abi": ABI, "bytecode": {"object": "0x6080"}}
        )
        artifact = parse_artifact(path)

        assert artifact.bytecode == "0x6080"
        assert artifact.source_format == "foundry"

    def test_plain_artifact_gets_prefix(self, tmp_path: Path):
        path = write_artifact(tmp_path / "Store.json", {"abi": ABI, "bin": "6080\n"})
        artifact = parse_artifact(path)

        assert artifact.bytecode == "0x6080"
        assert artifact.source_format == "plain"

    def test_name_falls_back_to_file_stem(self, tmp_path: Path):
        path = write_artifact(tmp_path / "VRF.json", {"abi": ABI, "bytecode": "0x6080"})
        assert parse_artifact(path).name == "VRF"

    def test_explicit_name_wins(self, tmp_path: Path):
        path = write_artifact(
            tmp_path / "x.json", {"contractName": "A", "abi": ABI, "bytecode": "0x6080"}
        )
        assert parse_artifact(path, name="B").name == "B"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ArtifactNotFoundError):
            parse_artifact(tmp_path / "missing.json")

    def test_missing_file_is_file_not_found(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            parse_artifact(tmp_path / "missing.json")

    def test_missing_abi(self, tmp_path: Path):
        path = write_artifact(tmp_path / "NoAbi.json", {"bytecode": "0x6080"})
        with pytest.raises(DefectiveArtifactError):
            parse_artifact(path)

    def test_missing_bytecode(self, tmp_path: Path):
        path = write_artifact(tmp_path / "NoCode.json", {"abi": ABI})
        with pytest.raises(DefectiveArtifactError):
            parse_artifact(path)

    @pytest.mark.parametrize("bytecode", ["0x", ""])
    def test_empty_bytecode(self, tmp_path: Path, bytecode):
        """Test that interfaces (empty bytecode) cannot be deployed."""
        path = write_artifact(tmp_path / "IFace.json", {"abi": ABI, "bytecode": bytecode})
        with pytest.raises(DefectiveArtifactError):
            parse_artifact(path)

    def test_malformed_json(self, tmp_path: Path):
        path = tmp_path / "Broken.json"
        path.write_text('{"abi": [')
        with pytest.raises(DefectiveArtifactError, match="Invalid JSON"):
            parse_artifact(path)

    @pytest.mark.parametrize("data", [[1, 2], "Store", None])
    def test_top_level_not_an_object(self, tmp_path: Path, data):
        path = write_artifact(tmp_path / "List.json", data)
        with pytest.raises(DefectiveArtifactError, match="not a JSON object"):
            parse_artifact(path)


class TestArtifactPaths:
    def test_default_dir_is_cwd_artifacts(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert get_default_artifacts_dir() == tmp_path / "artifacts"

    def test_default_dir_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("OCR_ARTIFACTS_DIR", str(tmp_path / "build"))
        assert get_default_artifacts_dir() == (tmp_path / "build").absolute()

    @pytest.mark.parametrize(
        "kind, file_name",
        [
            (ContractKind.TOKEN, "LinkToken.json"),
            (ContractKind.FLUX_AGGREGATOR, "FluxAggregator.json"),
            (ContractKind.OFFCHAIN_AGGREGATOR, "OffchainAggregator.json"),
            (ContractKind.STORAGE, "Store.json"),
            (ContractKind.VRF, "VRF.json"),
        ],
    )
    def test_artifact_file_per_kind(self, tmp_path: Path, kind, file_name):
        assert get_artifact_path(kind, tmp_path) == tmp_path.absolute() / file_name

    def test_accepts_string_dir(self, tmp_path: Path):
        path = get_artifact_path(ContractKind.VRF, str(tmp_path))
        assert path == tmp_path.absolute() / "VRF.json"


class TestLoadArtifact:
    @pytest.mark.parametrize("kind", list(ContractKind))
    def test_loads_every_fixture(self, artifacts_dir: Path, kind):
        artifact = load_artifact(kind, artifacts_dir)

        assert artifact.bytecode.startswith("0x60")
        assert artifact.abi
