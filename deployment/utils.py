import json
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Type

import click
import yaml
from eth_typing import ChecksumAddress
from eth_utils import keccak, to_bytes, to_checksum_address

from deployment.constants import ARTIFACTS_DIR, CHAIN_NAMES
from yogi import CONTRACTS, ContractLogicError, Ledger


class DeploymentConfigError(ValueError):
    pass


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def get_artifact_filepath(config: Dict) -> Path:
    """Returns the filepath of the artifact file."""
    artifact_config = config.get("artifacts", {})
    artifact_dir = Path(artifact_config.get("dir", ARTIFACTS_DIR))
    filename = artifact_config.get("filename")
    if not filename:
        raise DeploymentConfigError("artifact filename is not set in params file.")
    return artifact_dir / filename


def get_chain_id(config: Dict) -> int:
    deployment = config.get("deployment")
    if not deployment:
        raise DeploymentConfigError("deployment is not set in params file.")

    config_chain_id = deployment.get("chain_id")
    if not config_chain_id:
        raise DeploymentConfigError("chain_id is not set in params file.")
    return int(config_chain_id)


def validate_config(config: Dict) -> Path:
    """
    Checks that the deployment has not already been published for
    the chain_id specified in the params file.
    """
    print("Validating parameters YAML...")

    config_chain_id = get_chain_id(config)

    contracts = config.get("contracts")
    if not contracts:
        raise DeploymentConfigError("Constructor parameters file missing 'contracts' field.")

    registry_filepath = get_artifact_filepath(config=config)
    if not registry_filepath.exists():
        return registry_filepath

    registry_chain_ids = map(int, _load_json(registry_filepath).keys())
    if config_chain_id in registry_chain_ids:
        raise FileExistsError(f"Deployment is already published for chain_id {config_chain_id}.")

    return registry_filepath


def get_contract_container(contract: str) -> Type[Ledger]:
    try:
        return CONTRACTS[contract]
    except KeyError:
        raise ValueError(f"No contract found with name '{contract}'.")


def get_chain_name(chain_id: int) -> str:
    """Returns the name of the chain given its chain ID."""
    try:
        return CHAIN_NAMES[chain_id]
    except KeyError:
        raise ValueError(f"Chain ID {chain_id} not found in networks.")


def compute_contract_address(
    deployer: str, chain_id: int, contract_name: str, nonce: int
) -> ChecksumAddress:
    """
    Deterministic contract address, CREATE2-style:
    keccak256(0xff ++ deployer ++ salt ++ keccak256(init code))[12:]
    """
    salt = keccak(chain_id.to_bytes(32, "big") + nonce.to_bytes(32, "big"))
    init_code_hash = keccak(text=contract_name)
    preimage = b"\xff" + to_bytes(hexstr=deployer) + salt + init_code_hash
    return to_checksum_address(keccak(preimage)[12:])


@contextmanager
def ledger_errors():
    """Surfaces reverted ledger calls as click errors."""
    try:
        yield
    except ContractLogicError as e:
        raise click.ClickException(e.message) from e
