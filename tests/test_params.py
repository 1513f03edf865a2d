from collections import OrderedDict

import pytest
import yaml

from deployment.params import (
    Constant,
    ConstructorParameters,
    ContractName,
    Deployer,
    DeployerAccount,
    Transactor,
    VariableContext,
    _process_raw_value,
    _resolve_param,
)
from deployment.utils import DeploymentConfigError, _load_json, validate_config
from yogi import YogiMultiToken, YogiNFTCollection, YogiToken
from yogi.constants import TOKEN_INITIAL_SUPPLY
from yogi.ledger import ZERO_ADDRESS

CHAIN_ID = 1337


def make_config(tmp_path, contracts, constants=None, chain_id=CHAIN_ID):
    config = {
        "deployment": {"name": "test", "chain_id": chain_id},
        "artifacts": {"dir": str(tmp_path), "filename": "test.json"},
        "contracts": contracts,
    }
    if constants is not None:
        config["constants"] = constants
    return config


MULTI_TOKEN_CONTRACTS = [{"YogiMultiToken": {"constructor": {"base_uri": "$BASE_URI"}}}]
MULTI_TOKEN_CONSTANTS = {"BASE_URI": "https://ipfs.io/ipfs/QmYogi/"}


def test_variables(creator):
    context = VariableContext(
        contract_names=["YogiToken"], contract_name="YogiToken", constants={"SUPPLY": 42}
    )
    assert isinstance(_process_raw_value("$deployer", context), DeployerAccount)
    assert isinstance(_process_raw_value("$SUPPLY", context), Constant)
    assert isinstance(_process_raw_value("$YogiToken", context), ContractName)
    assert _process_raw_value("plain", context) == "plain"

    values = _process_raw_value(["$SUPPLY", 7], context)
    assert _resolve_param(values) == [42, 7]

    with pytest.raises(ValueError, match="Constant 'MISSING' not found"):
        _process_raw_value("$MISSING", context)
    with pytest.raises(ValueError, match="Contract name YogiNFTCollection not found"):
        _process_raw_value("$YogiNFTCollection", context)


def test_constructor_parameters(tmp_path):
    config = make_config(
        tmp_path, MULTI_TOKEN_CONTRACTS + ["YogiNFTCollection"], MULTI_TOKEN_CONSTANTS
    )
    parameters = ConstructorParameters.from_config(config)
    assert parameters.resolve("YogiMultiToken") == OrderedDict(
        base_uri="https://ipfs.io/ipfs/QmYogi/"
    )
    assert parameters.resolve("YogiNFTCollection") == OrderedDict()


@pytest.mark.parametrize(
    "contracts",
    [
        # wrong type
        [{"YogiToken": {"constructor": {"initial_supply": "lots"}}}],
        # wrong name
        [{"YogiToken": {"constructor": {"supply": 1000}}}],
        # missing parameter
        [{"YogiMultiToken": {"constructor": {}}}],
        # unexpected parameter
        [{"YogiNFTCollection": {"constructor": {"base_uri": "ipfs://"}}}],
    ],
)
def test_invalid_constructor_parameters(tmp_path, contracts):
    with pytest.raises(ConstructorParameters.Invalid):
        ConstructorParameters.from_config(make_config(tmp_path, contracts))


def test_optional_constructor_parameters(tmp_path):
    parameters = ConstructorParameters.from_config(make_config(tmp_path, ["YogiToken"]))
    assert parameters.resolve("YogiToken") == OrderedDict()

    contracts = [{"YogiToken": {"constructor": {"initial_supply": 1000}}}]
    parameters = ConstructorParameters.from_config(make_config(tmp_path, contracts))
    assert parameters.resolve("YogiToken") == OrderedDict(initial_supply=1000)

    # only inputs with a default may be left out
    contracts = [{"YogiToken": {"constructor": {"initial_supply": 1000, "cap": 5}}}]
    with pytest.raises(ConstructorParameters.Invalid, match="length mismatch"):
        ConstructorParameters.from_config(make_config(tmp_path, contracts))


def test_malformed_config(tmp_path):
    with pytest.raises(ValueError, match="Malformed"):
        ConstructorParameters.from_config(make_config(tmp_path, [42]))
    with pytest.raises(ValueError, match="No contract found"):
        ConstructorParameters.from_config(make_config(tmp_path, ["UnknownToken"]))
    with pytest.raises(DeploymentConfigError):
        validate_config({"deployment": {"chain_id": CHAIN_ID}, "contracts": ["YogiToken"]})
    with pytest.raises(DeploymentConfigError):
        validate_config(make_config(tmp_path, []))


def test_deployer(tmp_path, creator, account1):
    config = make_config(
        tmp_path,
        ["YogiToken", "YogiNFTCollection"] + MULTI_TOKEN_CONTRACTS,
        MULTI_TOKEN_CONSTANTS,
    )
    deployer = Deployer(config=config, path=tmp_path / "test.yml", account=creator, autosign=True)
    assert deployer.get_account() == creator
    assert deployer.chain_id == CHAIN_ID
    assert deployer.constants.BASE_URI == "https://ipfs.io/ipfs/QmYogi/"

    yogi_token = deployer.deploy(YogiToken)
    yogi_nft = deployer.deploy(YogiNFTCollection)
    multi_token = deployer.deploy(YogiMultiToken)
    assert yogi_token.total_supply() == TOKEN_INITIAL_SUPPLY
    addresses = {yogi_token.address, yogi_nft.address, multi_token.address}
    assert len(addresses) == 3
    assert ZERO_ADDRESS not in addresses
    assert multi_token.owner == creator.address
    assert multi_token.base_uri == "https://ipfs.io/ipfs/QmYogi/"
    assert Deployer.get_deployment("YogiToken") is yogi_token

    with pytest.raises(ValueError, match="already deployed"):
        deployer.deploy(YogiToken)

    receipt = deployer.transact(multi_token, "mint", account1.address, 0, 10)
    assert receipt.sender == creator.address
    assert multi_token.balance_of(account1, 0) == 10

    registry_filepath = deployer.finalize(deployments=[yogi_token, yogi_nft, multi_token])
    data = _load_json(registry_filepath)
    assert set(data[str(CHAIN_ID)]) == {"YogiToken", "YogiNFTCollection", "YogiMultiToken"}
    assert data[str(CHAIN_ID)]["YogiMultiToken"]["address"] == multi_token.address

    # The same chain cannot be published twice
    with pytest.raises(FileExistsError):
        Deployer(config=config, path=tmp_path / "test.yml", account=creator, autosign=True)


def test_deployer_addresses_are_deterministic(tmp_path, creator):
    addresses = list()
    for run in range(2):
        run_dir = tmp_path / str(run)
        config = make_config(run_dir, ["YogiNFTCollection"])
        deployer = Deployer(
            config=config, path=run_dir / "test.yml", account=creator, autosign=True
        )
        addresses.append(deployer.deploy(YogiNFTCollection).address)
    assert addresses[0] == addresses[1]


def test_deployer_from_yaml(tmp_path, creator):
    filepath = tmp_path / "params.yml"
    with open(filepath, "w") as file:
        yaml.safe_dump(make_config(tmp_path, ["YogiNFTCollection"]), file)
    deployer = Deployer.from_yaml(filepath=filepath, account=creator, autosign=True)
    assert deployer.path == filepath
    assert deployer.registry_filepath == tmp_path / "test.json"


def test_transactor_confirmation(yogi_token, creator, account1, monkeypatch):
    transactor = Transactor(account=creator)
    monkeypatch.setattr("builtins.input", lambda _: "y")
    transactor.transact(yogi_token, "transfer", account1.address, 5)
    assert yogi_token.balance_of(account1) == 5

    monkeypatch.setattr("builtins.input", lambda _: "n")
    with pytest.raises(SystemExit):
        transactor.transact(yogi_token, "transfer", account1.address, 5)
    assert yogi_token.balance_of(account1) == 5

    with pytest.raises(ValueError, match="Invalid arguments"):
        Transactor(account=creator, autosign=True).transact(yogi_token, "transfer", 1, 2, 3)
