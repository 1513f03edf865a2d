import json

import pytest

from deployment.registry import (
    RegistryEntry,
    contracts_from_registry,
    merge_registries,
    normalize_registry,
    read_registry,
    registry_from_deployments,
    update_registry,
    write_registry,
)
from deployment.utils import compute_contract_address
from tests.conftest import BASE_URI
from yogi import YogiMultiToken, YogiNFTCollection, YogiToken

CHAIN_ID = 1337


@pytest.fixture
def deployments(creator):
    def address(name, nonce):
        return compute_contract_address(creator.address, CHAIN_ID, name, nonce)

    return [
        YogiToken(sender=creator, address=address("YogiToken", 0)),
        YogiMultiToken(BASE_URI, sender=creator, address=address("YogiMultiToken", 1)),
    ]


@pytest.fixture
def registry_filepath(tmp_path, deployments, creator):
    filepath = tmp_path / "registry.json"
    registry_from_deployments(
        deployments=deployments,
        output_filepath=filepath,
        chain_id=CHAIN_ID,
        deployer=creator.address,
    )
    return filepath


def test_registry_from_deployments(registry_filepath, deployments, creator):
    with open(registry_filepath) as file:
        data = json.load(file)
    assert list(data) == [str(CHAIN_ID)]
    assert list(data[str(CHAIN_ID)]) == ["YogiMultiToken", "YogiToken"]

    multi_token = data[str(CHAIN_ID)]["YogiMultiToken"]
    assert multi_token["address"] == deployments[1].address
    assert multi_token["deployer"] == creator.address
    assert multi_token["state"] == deployments[1].to_state()

    entries = read_registry(registry_filepath)
    assert {entry.name for entry in entries} == {"YogiToken", "YogiMultiToken"}
    assert all(entry.chain_id == CHAIN_ID for entry in entries)


def test_registry_requires_deployed_ledgers(tmp_path, creator):
    with pytest.raises(ValueError):
        registry_from_deployments(
            deployments=[YogiToken(sender=creator)],
            output_filepath=tmp_path / "registry.json",
            chain_id=CHAIN_ID,
            deployer=creator.address,
        )


def test_contracts_from_registry(registry_filepath, deployments, creator, account1):
    contracts = contracts_from_registry(registry_filepath, chain_id=CHAIN_ID)
    assert set(contracts) == {"YogiToken", "YogiMultiToken"}
    multi_token = contracts["YogiMultiToken"]
    assert isinstance(multi_token, YogiMultiToken)
    assert multi_token.address == deployments[1].address
    assert multi_token.to_state() == deployments[1].to_state()

    # Other chains are ignored
    assert contracts_from_registry(registry_filepath, chain_id=1) == {}

    # Changes are persisted with update_registry
    multi_token.set_token_uri(0, f"{BASE_URI}yogi_coin.json", sender=creator)
    multi_token.mint(account1, 0, 10, sender=creator)
    update_registry(registry_filepath, chain_id=CHAIN_ID, deployments=contracts)

    reloaded = contracts_from_registry(registry_filepath, chain_id=CHAIN_ID)["YogiMultiToken"]
    assert reloaded.uri(0) == f"{BASE_URI}yogi_coin.json"
    assert reloaded.balance_of(account1, 0) == 10
    assert not registry_filepath.with_suffix(".temp.json").exists()


def test_write_registry_refuses_overlapping_chains(registry_filepath, creator):
    nft = YogiNFTCollection(sender=creator, address=creator.address)
    entry = RegistryEntry(
        chain_id=CHAIN_ID,
        name="YogiNFTCollection",
        address=nft.address,
        deployer=creator.address,
        state=nft.to_state(),
    )
    written = write_registry([entry], registry_filepath)
    assert written == registry_filepath.with_suffix(".unmerged.json")
    assert {e.name for e in read_registry(registry_filepath)} == {"YogiToken", "YogiMultiToken"}

    # A different chain is merged into the existing file
    written = write_registry([entry._replace(chain_id=11155111)], registry_filepath)
    assert written == registry_filepath
    chain_ids = {e.chain_id for e in read_registry(registry_filepath)}
    assert chain_ids == {CHAIN_ID, 11155111}


def test_merge_registries(tmp_path, registry_filepath, deployments, creator, monkeypatch):
    other_filepath = tmp_path / "other.json"
    other_token = YogiToken(1000, sender=creator, address=creator.address)
    registry_from_deployments(
        deployments=[other_token],
        output_filepath=other_filepath,
        chain_id=CHAIN_ID,
        deployer=creator.address,
    )

    # Conflict on YogiToken: pick the second registry
    monkeypatch.setattr("builtins.input", lambda _: "2")
    output_filepath = tmp_path / "merged.json"
    merge_registries(registry_filepath, other_filepath, output_filepath)
    merged = {entry.name: entry for entry in read_registry(output_filepath)}
    assert merged["YogiToken"].address == other_token.address
    assert merged["YogiToken"].state["total_supply"] == 1000
    assert merged["YogiMultiToken"].address == deployments[1].address

    # Deprecated contracts are dropped
    output_filepath = tmp_path / "merged-deprecated.json"
    merge_registries(
        registry_filepath,
        other_filepath,
        output_filepath,
        deprecated_contracts=["YogiToken"],
    )
    assert [entry.name for entry in read_registry(output_filepath)] == ["YogiMultiToken"]


def test_merge_registries_abort(tmp_path, registry_filepath, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda _: "A")
    with pytest.raises(SystemExit):
        merge_registries(registry_filepath, registry_filepath, tmp_path / "merged.json")
    assert not (tmp_path / "merged.json").exists()


def test_normalize_registry(registry_filepath):
    with open(registry_filepath) as file:
        data = json.load(file)
    with open(registry_filepath, "w") as file:
        json.dump(data, file)  # compact, non-standard layout

    normalize_registry(registry_filepath)
    with open(registry_filepath) as file:
        normalized = file.read()
    assert normalized == json.dumps(data, indent=4, separators=(",", ": "), sort_keys=False)
    assert not registry_filepath.with_suffix(".temp.json").exists()
