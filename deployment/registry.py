import json
import shutil
from collections import OrderedDict, defaultdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from deployment.utils import _load_json, get_contract_container
from yogi import Ledger

ChainId = int
ContractName = str
LedgerState = Dict[str, Any]


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """Represents a single deployed ledger in a contract registry."""

    chain_id: ChainId
    name: ContractName
    address: ChecksumAddress
    deployer: str
    state: LedgerState


def _get_entry(
    chain_id: ChainId,
    deployer: str,
    instance: Ledger,
    registry_names: Dict[ContractName, ContractName],
) -> RegistryEntry:
    real_contract_name = type(instance).__name__
    contract_name = registry_names.get(
        real_contract_name,  # look up name in registry_names
        real_contract_name,  # default to the real contract name
    )
    if instance.address is None:
        raise ValueError(f"{contract_name} has no address; was it deployed?")
    entry = RegistryEntry(
        chain_id=chain_id,
        name=contract_name,
        address=to_checksum_address(instance.address),
        deployer=deployer,
        state=instance.to_state(),
    )
    return entry


def read_registry(filepath: Path) -> List[RegistryEntry]:
    data = _load_json(filepath)
    registry_entries = list()
    for chain_id, entries in data.items():
        for contract_name, artifacts in entries.items():
            registry_entry = RegistryEntry(
                chain_id=int(chain_id),
                name=contract_name,
                address=artifacts["address"],
                deployer=artifacts["deployer"],
                state=artifacts["state"],
            )
            registry_entries.append(registry_entry)
    return registry_entries


def _dump_registry(entries: List[RegistryEntry]) -> Dict[str, Dict[str, Any]]:
    # common order: chain id, then contract name
    entries = sorted(entries, key=lambda entry: (str(entry.chain_id), entry.name))
    data = defaultdict(dict)
    for entry in entries:
        data[str(entry.chain_id)][entry.name] = {
            "address": entry.address,
            "deployer": entry.deployer,
            "state": entry.state,
        }
    return data


def write_registry(entries: List[RegistryEntry], filepath: Path, silent: bool = False) -> Path:
    """Writes a contract registry to a file."""

    if not entries:
        print("No entries provided.")
        return filepath

    data = _dump_registry(entries)

    # Create the parent directory if it does not exist
    filepath.parent.mkdir(parents=True, exist_ok=True)

    # If the file already exists, attempt to merge the data, if not create a new file
    if filepath.exists():
        if not silent:
            print(f"Updating existing registry at {filepath}.")
        existing_data = _load_json(filepath)

        if any(chain_id in existing_data for chain_id in data):
            filepath = filepath.with_suffix(".unmerged.json")
            if not silent:
                print(
                    "Cannot merge registries with overlapping chain IDs.\n"
                    f"Writing to {filepath} to avoid overwriting existing data."
                )
        else:
            existing_data.update(data)
            data = existing_data
    elif not silent:
        print(f"Creating new registry at {filepath}.")

    with open(filepath, "w") as file:
        json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)

    return filepath


def update_registry(
    filepath: Path, chain_id: ChainId, deployments: Dict[ContractName, Ledger]
) -> Path:
    """Replaces the persisted state of already registered ledgers with their current state."""
    entries = read_registry(filepath=filepath)
    updated = list()
    for entry in entries:
        instance = deployments.get(entry.name)
        if entry.chain_id == chain_id and instance is not None:
            entry = entry._replace(state=instance.to_state())
        updated.append(entry)

    temp_filepath = filepath.with_suffix(".temp.json")
    with open(temp_filepath, "w") as file:
        json.dump(_dump_registry(updated), file, **STANDARD_REGISTRY_JSON_FORMAT)
    shutil.move(temp_filepath, filepath)
    return filepath


class ConflictResolution(Enum):
    USE_1 = 1
    USE_2 = 2


def _select_conflict_resolution(
    registry_1_entry, registry_1_filepath, registry_2_entry, registry_2_filepath
) -> ConflictResolution:
    print(
        f"\n! Conflict detected for {registry_1_entry.name} "
        f"on chain id {registry_1_entry.chain_id}:"
    )
    print(
        f"[1]: {registry_1_entry.name} at {registry_1_entry.address} " f"for {registry_1_filepath}"
    )
    print(
        f"[2]: {registry_2_entry.name} at {registry_2_entry.address} " f"for {registry_2_filepath}"
    )
    print("[A]: Abort merge")

    valid_str_answers = [
        str(ConflictResolution.USE_1.value),
        str(ConflictResolution.USE_2.value),
        "A",
    ]
    answer = None
    while answer not in valid_str_answers:
        answer = input(f"Merge resolution, {valid_str_answers}? ")

    if answer == "A":
        print("Merge Aborted!")
        exit(-1)
    return ConflictResolution(int(answer))


def registry_from_deployments(
    deployments: List[Ledger],
    output_filepath: Path,
    chain_id: ChainId,
    deployer: str,
    registry_names: Optional[Dict[ContractName, ContractName]] = None,
) -> Path:
    """Creates a contract registry from freshly deployed ledgers."""
    registry_names = registry_names or dict()
    entries = [
        _get_entry(
            chain_id=chain_id,
            deployer=deployer,
            instance=instance,
            registry_names=registry_names,
        )
        for instance in deployments
    ]
    output_filepath = write_registry(entries=entries, filepath=output_filepath)
    print(f"(i) Registry written to {output_filepath}!")
    return output_filepath


def merge_registries(
    registry_1_filepath: Path,
    registry_2_filepath: Path,
    output_filepath: Path,
    deprecated_contracts: Optional[List[ContractName]] = None,
) -> Path:
    """Merges two contract registries."""
    # If no deprecated contracts are specified, use an empty list
    deprecated_contracts = deprecated_contracts or []

    # Read the registries, excluding deprecated contracts
    reg1 = defaultdict(OrderedDict)
    reg2 = defaultdict(OrderedDict)

    for e in read_registry(registry_1_filepath):
        if e.name in deprecated_contracts:
            continue
        reg1[e.chain_id][e.name] = e

    for e in read_registry(registry_2_filepath):
        if e.name in deprecated_contracts:
            continue
        reg2[e.chain_id][e.name] = e

    merged: List[RegistryEntry] = list()

    # Iterate over all chains and unique contract names across both registries
    all_chains = set(reg1) | set(reg2)
    common_chains = set(reg1) & set(reg2)
    for chain in all_chains:
        reg1_chain_entries, reg2_chain_entries = reg1.get(chain, {}), reg2.get(chain, {})
        if chain in common_chains:
            # check for conflicting contracts
            all_contracts = set(reg1_chain_entries) | set(reg2_chain_entries)
            for name in all_contracts:
                entry_1, entry_2 = reg1_chain_entries.get(name), reg2_chain_entries.get(name)
                if entry_1 and entry_2:
                    # entries for the same name (same chain)
                    resolution = _select_conflict_resolution(
                        registry_1_entry=entry_1,
                        registry_2_entry=entry_2,
                        registry_1_filepath=registry_1_filepath,
                        registry_2_filepath=registry_2_filepath,
                    )
                    selected_entry = entry_1 if resolution == ConflictResolution.USE_1 else entry_2
                else:
                    selected_entry = entry_1 or entry_2

                # commit the selected entry
                merged.append(selected_entry)
        else:
            # not a common chain so just move on right along
            selected_entries = reg1_chain_entries or reg2_chain_entries
            merged.extend(list(selected_entries.values()))

    # Write the merged registry to the specified output file path
    write_registry(entries=merged, filepath=output_filepath)
    print(f"Merged registry output to {output_filepath}")
    return output_filepath


def contracts_from_registry(filepath: Path, chain_id: ChainId) -> Dict[str, Ledger]:
    """Returns a dictionary of live ledgers rebuilt from a contract registry."""
    registry_entries = read_registry(filepath=filepath)
    deployments = dict()
    for registry_entry in registry_entries:
        if registry_entry.chain_id != chain_id:
            continue
        contract_container = get_contract_container(registry_entry.name)
        contract_instance = contract_container.from_state(
            registry_entry.state, address=registry_entry.address
        )
        deployments[registry_entry.name] = contract_instance
    return deployments


def normalize_registry(filepath: Path):
    """Normalizes a potentially non-standard registry file."""
    try:
        registry_entries = read_registry(filepath=filepath)
    except Exception:
        print(f"Error when reading registry at {filepath}.")
        raise

    try:
        temp_filepath = filepath.with_suffix(".temp.json")
        write_registry(entries=registry_entries, filepath=temp_filepath, silent=True)
        shutil.copy(temp_filepath, filepath)
        temp_filepath.unlink()
        print(f"Successfully normalized registry at {filepath}.")
    except Exception:
        print(f"Error when normalizing registry at {filepath}.")
        raise
