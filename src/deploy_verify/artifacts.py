"""Hardhat artifact resolution for deploy-verify library."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import ArtifactNotFoundError
from .types import BuildInfo, ContractArtifact

HARDHAT_ARTIFACT_FORMAT = "hh-sol-artifact-1"


def get_default_artifacts_dir() -> Path:
    """
    Get default artifacts directory (Hardhat's paths.artifacts).

    Returns:
        Path to ./artifacts
    """
    return Path.cwd() / "artifacts"


def _find_artifact_files(artifacts_dir: Path, contract_name: str) -> List[Path]:
    # build-info/*.json and *.dbg.json never match "<Name>.json" except by accident
    return sorted(
        p
        for p in artifacts_dir.rglob(f"{contract_name}.json")
        if "build-info" not in p.parts
    )


def _load_build_info(artifact_file: Path) -> Optional[BuildInfo]:
    """
    Follow the .dbg.json pointer of an artifact to its build-info file.

    Args:
        artifact_file: Path to <Name>.json

    Returns:
        BuildInfo, or None if the debug file or build-info file is absent
    """
    dbg_file = artifact_file.with_name(f"{artifact_file.stem}.dbg.json")
    try:
        with open(dbg_file) as f:
            dbg = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return None

    build_info_ref = dbg.get("buildInfo")
    if not build_info_ref:
        return None

    # The pointer is relative to the directory holding the .dbg.json
    build_info_file = (dbg_file.parent / build_info_ref).resolve()
    try:
        with open(build_info_file) as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return None

    return BuildInfo(
        solc_version=data["solcVersion"],
        solc_long_version=data.get("solcLongVersion", data["solcVersion"]),
        input=data["input"],
    )


def parse_artifact(file_path: Path) -> ContractArtifact:
    """
    Parse a Hardhat artifact JSON file.

    Args:
        file_path: Path to artifacts/<source>/<Name>.json

    Returns:
        ContractArtifact with build info attached when it can be found

    Raises:
        ArtifactNotFoundError: If the file is not a deployable Hardhat artifact
    """
    with open(file_path) as f:
        data: Dict[str, Any] = json.load(f)

    if data.get("_format") != HARDHAT_ARTIFACT_FORMAT:
        raise ArtifactNotFoundError(
            f"Not a Hardhat artifact ({data.get('_format')!r}): {file_path}"
        )

    # Interfaces and abstract contracts compile to empty bytecode
    bytecode = data.get("bytecode") or "0x"
    if bytecode == "0x":
        raise ArtifactNotFoundError(
            f"{data['contractName']} has no creation bytecode (abstract or interface): {file_path}"
        )

    return ContractArtifact(
        name=data["contractName"],
        source_name=data["sourceName"],
        abi=data["abi"],
        bytecode=bytecode,
        build_info=_load_build_info(file_path),
    )


def resolve_artifact(
    contract_name: str, artifacts_dir: Optional[Union[Path, str]] = None
) -> ContractArtifact:
    """
    Resolve a contract name to its compiled artifact.

    Args:
        contract_name: Contract name, e.g. "Farm"
        artifacts_dir: Hardhat artifacts directory (defaults to ./artifacts)

    Returns:
        ContractArtifact

    Raises:
        ArtifactNotFoundError: If no artifact or more than one matches the name
    """
    if artifacts_dir is None:
        artifacts_dir = get_default_artifacts_dir()
    artifacts_dir = Path(artifacts_dir)

    if not artifacts_dir.is_dir():
        raise ArtifactNotFoundError(
            f"Artifacts directory not found at {artifacts_dir}. Compile the contracts first."
        )

    candidates = _find_artifact_files(artifacts_dir, contract_name)
    if not candidates:
        raise ArtifactNotFoundError(
            f"No artifact for contract '{contract_name}' under {artifacts_dir}"
        )
    if len(candidates) > 1:
        listed = ", ".join(str(p.relative_to(artifacts_dir)) for p in candidates)
        raise ArtifactNotFoundError(
            f"Ambiguous contract name '{contract_name}', candidates: {listed}"
        )

    return parse_artifact(candidates[0])
