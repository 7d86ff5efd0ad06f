"""Contract artifact discovery and parsing for ocr-deployments library."""

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import ARTIFACTS_DIR_ENV
from .exceptions import ArtifactNotFoundError, DefectiveArtifactError
from .types import ContractArtifact, ContractKind


class ArtifactFormat(Enum):
    """
    Compiled artifact file formats.

    - HARDHAT: {"abi": [...], "bytecode": "0x..."} (also truffle)
    - FOUNDRY: {"abi": [...], "bytecode": {"object": "0x..."}}
    - PLAIN: {"abi": [...], "bin": "..."} as written by solc --combined-json style tools
    """

    HARDHAT = "hardhat"
    FOUNDRY = "foundry"
    PLAIN = "plain"


def get_default_artifacts_dir() -> Path:
    """
    Get default artifacts directory.

    Returns:
        $OCR_ARTIFACTS_DIR if set, otherwise ./artifacts
    """
    env_dir = os.environ.get(ARTIFACTS_DIR_ENV)
    if env_dir:
        return Path(env_dir).absolute()
    return Path.cwd() / "artifacts"


def get_artifact_path(
    kind: ContractKind, artifacts_dir: Optional[Union[Path, str]] = None
) -> Path:
    """
    Get the artifact file path for a contract kind.

    Args:
        kind: Contract kind
        artifacts_dir: Custom artifacts directory (defaults to get_default_artifacts_dir())

    Returns:
        Path to the kind's artifact JSON file
    """
    if artifacts_dir is None:
        artifacts_dir = get_default_artifacts_dir()
    else:
        artifacts_dir = Path(artifacts_dir).absolute()

    return artifacts_dir / kind.artifact_file


def detect_artifact_format(data: Dict[str, Any]) -> Optional[ArtifactFormat]:
    """
    Detect which compiler output shape an artifact uses.

    Args:
        data: Decoded artifact JSON

    Returns:
        ArtifactFormat, or None if no bytecode field is recognised
    """
    bytecode = data.get("bytecode")
    if isinstance(bytecode, dict) and "object" in bytecode:
        return ArtifactFormat.FOUNDRY
    if isinstance(bytecode, str):
        return ArtifactFormat.HARDHAT
    if isinstance(data.get("bin"), str):
        return ArtifactFormat.PLAIN
    return None


def _normalize_bytecode(bytecode: str) -> str:
    bytecode = bytecode.strip()
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return bytecode


def parse_artifact(file_path: Path, name: Optional[str] = None) -> ContractArtifact:
    """
    Parse a compiled contract artifact file.

    Args:
        file_path: Path to artifact JSON file
        name: Contract name (defaults to contractName field, then file stem)

    Returns:
        ContractArtifact with 0x-prefixed creation bytecode

    Raises:
        ArtifactNotFoundError: If file does not exist
        DefectiveArtifactError: If the file is not a JSON object, or ABI or
            bytecode is missing or empty
    """
    if not file_path.exists():
        raise ArtifactNotFoundError(f"Contract artifact not found at {file_path}")

    with open(file_path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DefectiveArtifactError(f"Invalid JSON in artifact file {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise DefectiveArtifactError(f"Artifact file is not a JSON object: {file_path}")

    if "abi" not in data or not isinstance(data["abi"], list):
        raise DefectiveArtifactError(f"Missing ABI in artifact file: {file_path}")

    artifact_format = detect_artifact_format(data)
    if artifact_format == ArtifactFormat.FOUNDRY:
        bytecode = data["bytecode"]["object"]
    elif artifact_format == ArtifactFormat.HARDHAT:
        bytecode = data["bytecode"]
    elif artifact_format == ArtifactFormat.PLAIN:
        bytecode = data["bin"]
    else:
        raise DefectiveArtifactError(f"Missing bytecode in artifact file: {file_path}")

    bytecode = _normalize_bytecode(bytecode)
    # An interface or abstract contract compiles to empty bytecode
    if bytecode == "0x":
        raise DefectiveArtifactError(f"Empty bytecode in artifact file: {file_path}")

    return ContractArtifact(
        name=name or data.get("contractName") or file_path.stem,
        abi=data["abi"],
        bytecode=bytecode,
        source_format=artifact_format.value,
    )


def load_artifact(
    kind: ContractKind, artifacts_dir: Optional[Union[Path, str]] = None
) -> ContractArtifact:
    """Load the artifact for a contract kind from the artifacts directory."""
    return parse_artifact(get_artifact_path(kind, artifacts_dir))
