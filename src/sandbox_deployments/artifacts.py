"""Contract artifact parsers for sandbox-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from eth_utils import collapse_if_tuple, function_signature_to_4byte_selector, keccak

from .exceptions import ArtifactError
from .types import ConstructorParam, ContractDescriptor


def parse_artifact(data: Dict[str, Any], name: Optional[str] = None) -> ContractDescriptor:
    """
    Build a ContractDescriptor from a compiled artifact.

    Args:
        data: Artifact dictionary with "abi" and "bytecode" keys
              (hardhat/foundry style; "contractName" is optional)
        name: Contract name, overrides "contractName" from the artifact

    Returns:
        ContractDescriptor with artifact hash, constructor params and selectors

    Raises:
        ArtifactError: If abi or bytecode are missing or malformed
    """
    if "abi" not in data:
        raise ArtifactError("Artifact is missing 'abi'")

    bytecode = data.get("bytecode")
    # Foundry nests bytecode under {"object": "0x..."}
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")
    if not bytecode:
        raise ArtifactError("Artifact is missing 'bytecode'")

    try:
        code = bytes.fromhex(bytecode[2:] if bytecode.startswith("0x") else bytecode)
    except ValueError as e:
        raise ArtifactError(f"Artifact bytecode is not valid hex: {e}") from e

    abi: List[Dict[str, Any]] = data["abi"]

    constructor_params: tuple = ()
    selectors = []
    for item in abi:
        item_type = item.get("type")
        if item_type == "constructor":
            constructor_params = tuple(
                ConstructorParam(name=inp.get("name", ""), type=collapse_if_tuple(inp))
                for inp in item.get("inputs", [])
            )
        elif item_type == "function":
            signature = _function_signature(item)
            selector = "0x" + function_signature_to_4byte_selector(signature).hex()
            selectors.append((signature, selector))

    return ContractDescriptor(
        name=name or data.get("contractName", "Contract"),
        artifact_hash="0x" + keccak(code).hex(),
        constructor_params=constructor_params,
        function_selectors=tuple(selectors),
    )


def load_artifact(file_path: Union[Path, str], name: Optional[str] = None) -> ContractDescriptor:
    """
    Load a contract artifact JSON file.

    The contract name defaults to "contractName" in the file, then the file stem.
    """
    file_path = Path(file_path)
    try:
        with open(file_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Artifact {file_path} is not valid JSON: {e}") from e

    return parse_artifact(data, name=name or data.get("contractName") or file_path.stem)


def _function_signature(abi_item: Dict[str, Any]) -> str:
    types = ",".join(collapse_if_tuple(inp) for inp in abi_item.get("inputs", []))
    return f"{abi_item['name']}({types})"
