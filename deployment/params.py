import inspect
import typing
from abc import ABC, abstractmethod
from collections import OrderedDict, namedtuple
from pathlib import Path
from typing import Any, List, Type

from eth_account.signers.local import LocalAccount
from web3.auto import w3

from deployment.accounts import get_account
from deployment.confirm import _confirm_resolution, _continue
from deployment.constants import CHAIN_NAMES
from deployment.registry import registry_from_deployments
from deployment.utils import (
    _load_yaml,
    compute_contract_address,
    get_chain_id,
    get_contract_container,
    validate_config,
)
from yogi import Ledger, Receipt
from yogi.ledger import ZERO_ADDRESS

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"


class VariableContext:
    def __init__(
        self,
        contract_names: List[str],
        contract_name: str,
        constants: typing.Dict[str, Any] = None,
    ):
        self.contract_names = contract_names or list()
        self.contract_name = contract_name
        self.constants = constants or dict()


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        result = isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)
        return result


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is a special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self) -> Any:
        deployer_account = Deployer.get_account()
        if deployer_account is None:
            return ZERO_ADDRESS
        return deployer_account.address


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise ValueError(f"Constant '{constant_name}' not found in deployment file.")

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self) -> Any:
        return self.constant_value


class ContractName(Variable):
    def __init__(self, contract_name: str, context: VariableContext):
        if contract_name not in context.contract_names:
            raise ValueError(f"Contract name {contract_name} not found")
        self.contract_name = contract_name

    def resolve(self) -> Any:
        """Resolves a contract address."""
        contract_instance = Deployer.get_deployment(self.contract_name)
        if contract_instance is None:
            # eager validation: not deployed yet
            return ZERO_ADDRESS
        return contract_instance.address


def _resolve_param(value: Any) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v) for v in value]

    if isinstance(value, Variable):
        return value.resolve()

    return value  # literally a value


def _resolve_params(parameters: OrderedDict) -> OrderedDict:
    resolved_parameters = OrderedDict()
    for name, value in parameters.items():
        resolved_parameters[name] = _resolve_param(value)

    return resolved_parameters


def _variable_from_value(variable: Any, context: VariableContext) -> Variable:
    variable = variable.strip(Variable.VARIABLE_PREFIX)
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount()
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    else:
        return ContractName(variable, context)


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def _process_raw_values(values: OrderedDict, variable_context: VariableContext) -> OrderedDict:
    processed_parameters = OrderedDict()
    for name, value in values.items():
        processed_parameters[name] = _process_raw_value(value, variable_context)

    return processed_parameters


def _get_contract_names(config: typing.Dict) -> List[str]:
    contract_names = list()
    for contract_info in config["contracts"]:
        if isinstance(contract_info, str):
            contract_names.append(contract_info)
        elif isinstance(contract_info, dict):
            contract_names.extend(list(contract_info.keys()))
        else:
            raise ValueError("Malformed constructor parameters YAML.")

    return contract_names


def _name_method_args(method, args: typing.Sequence[Any]) -> typing.Dict[str, Any]:
    """Binds positional transaction arguments to the parameter names of a ledger method."""
    try:
        bound = inspect.signature(method).bind_partial(*args)
    except TypeError as e:
        raise ValueError(f"Invalid arguments for '{method.__name__}': {e}")
    return dict(bound.arguments)


def _optional_constructor_inputs(container) -> typing.Set[str]:
    """Returns the names of the constructor inputs of a ledger that have a default value."""
    parameters = inspect.signature(container).parameters.values()
    return {p.name for p in parameters if p.default is not inspect.Parameter.empty}


def _validate_constructor_inputs(
    contract_name: str,
    inputs: typing.Sequence[typing.Tuple[str, str]],
    resolved_parameters: OrderedDict,
    optional_inputs: typing.Collection[str] = (),
) -> None:
    """Validates the constructor parameters against the constructor inputs of a ledger."""
    omitted = [name for name, _ in inputs[len(resolved_parameters) :]]
    if len(resolved_parameters) > len(inputs) or not set(omitted).issubset(optional_inputs):
        raise ConstructorParameters.Invalid(
            f"Constructor parameters length mismatch - "
            f"{contract_name} requires {len(inputs)}, Got {len(resolved_parameters)}."
        )
    if not inputs:
        return  # no constructor parameters

    codex = enumerate(zip(inputs, resolved_parameters.items()), start=0)
    for position, ((input_name, input_type), resolved_input) in codex:
        name, value = resolved_input
        # validate name
        if input_name != name:
            raise ConstructorParameters.Invalid(
                f"{contract_name} constructor parameter '{name}' at position {position} does not "
                f"match the expected name '{input_name}'."
            )

        # validate value type
        if not w3.is_encodable(input_type, value):
            raise ConstructorParameters.Invalid(
                f"Constructor param name '{name}' at position {position} has a value '{value}' "
                f"whose type does not match expected type '{input_type}'"
            )


def validate_constructor_parameters(contracts_parameters) -> None:
    """Validates the constructor parameters for all contracts in a single config."""
    for contract, parameters in contracts_parameters.items():
        if not isinstance(parameters, dict):
            # this can happen if the yml file is malformed
            raise ValueError(f"Malformed constructor parameter config for {contract}.")

        resolved_parameters = _resolve_params(parameters=parameters)
        contract_container = get_contract_container(contract)
        _validate_constructor_inputs(
            contract_name=contract,
            inputs=contract_container.CONSTRUCTOR_INPUTS,
            resolved_parameters=resolved_parameters,
            optional_inputs=_optional_constructor_inputs(contract_container),
        )


class ConstructorParameters:
    """Represents the constructor parameters for a set of contracts."""

    class Invalid(ValueError):
        """Raised when the constructor parameters are invalid"""

    def __init__(self, parameters: OrderedDict):
        self.parameters = parameters
        validate_constructor_parameters(parameters)

    @classmethod
    def from_config(cls, config: typing.Dict) -> "ConstructorParameters":
        """Loads the constructor parameters from a parsed YAML config."""
        print("Processing contract constructor parameters...")
        contracts_config = OrderedDict()
        contract_names = _get_contract_names(config)
        constants = config.get("constants")
        for contract_info in config["contracts"]:
            if isinstance(contract_info, str):
                contract_constructor_params = {contract_info: OrderedDict()}
            elif isinstance(contract_info, dict):
                if len(contract_info) != 1:
                    raise ValueError("Malformed constructor parameters YAML.")

                contract_name = list(contract_info.keys())[0]  # only one entry
                contract_data = contract_info[contract_name] or dict()
                parameter_values = cls._process_parameters(
                    constants, contract_data, contract_name, contract_names
                )

                contract_constructor_params = {contract_name: parameter_values}
            else:
                raise ValueError("Malformed constructor parameters YAML.")
            contracts_config.update(contract_constructor_params)

        return cls(parameters=contracts_config)

    @classmethod
    def _process_parameters(cls, constants, contract_data, contract_name, contract_names):
        parameter_values = OrderedDict()
        if CONTRACT_CONSTRUCTOR_PARAMETER_KEY in contract_data:
            parameter_values = _process_raw_values(
                contract_data[CONTRACT_CONSTRUCTOR_PARAMETER_KEY] or dict(),
                VariableContext(
                    contract_names=contract_names, constants=constants, contract_name=contract_name
                ),
            )
        return parameter_values

    def resolve(self, contract_name: str) -> OrderedDict:
        """Resolves the constructor parameters for a single contract."""
        resolved_params = _resolve_params(self.parameters[contract_name])
        return resolved_params


class Transactor:
    """
    Represents an account plus validated/annotated transaction execution.
    """

    def __init__(self, account: LocalAccount, autosign: bool = False):
        self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign

    def get_account(self) -> LocalAccount:
        """Returns the transactor account."""
        return self._account

    def transact(self, contract: Ledger, method_name: str, *args) -> Receipt:
        method = getattr(contract, method_name)
        named_args = _name_method_args(method, args)
        base_message = (
            f"\nTransacting {type(contract).__name__}"
            f"[{str(contract.address)[:10]}].{method_name}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        result = method(*args, sender=self._account)
        return result


class Deployer(Transactor):
    """
    Represents an account plus
    deployment parameters for a set of contracts, plus validated/annotated execution.
    """

    __DEPLOYER_ACCOUNT: LocalAccount = None
    __DEPLOYMENTS: typing.Dict[str, Ledger] = dict()

    def __init__(
        self,
        config: typing.Dict,
        path: Path,
        account: typing.Optional[LocalAccount] = None,
        autosign: bool = False,
    ):
        self.path = path
        self.config = config
        self.registry_filepath = validate_config(config=self.config)
        self.chain_id = get_chain_id(config=self.config)
        if account is None:
            account = get_account(chain_id=self.chain_id)
        super().__init__(account, autosign)

        self._set_account(self._account)
        self._reset_deployments()
        self.constructor_parameters = ConstructorParameters.from_config(self.config)

        # Little trick to expose constants as attributes (e.g., deployer.constants.FOO)
        constants = config.get("constants") or {}
        _Constants = namedtuple("_Constants", list(constants))
        self.constants = _Constants(**constants)

        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployer":
        config = _load_yaml(filepath)
        return cls(config=config, path=filepath, *args, **kwargs)

    @classmethod
    def get_account(cls) -> LocalAccount:
        """Returns the deployer account."""
        return cls.__DEPLOYER_ACCOUNT

    @classmethod
    def _set_account(cls, deployer: LocalAccount) -> None:
        """Sets the deployer account."""
        cls.__DEPLOYER_ACCOUNT = deployer

    @classmethod
    def get_deployment(cls, contract_name: str) -> typing.Optional[Ledger]:
        """Returns the ledger deployed under a contract name in the current session, if any."""
        return cls.__DEPLOYMENTS.get(contract_name)

    @classmethod
    def _reset_deployments(cls) -> None:
        cls.__DEPLOYMENTS = dict()

    def deploy(self, container: Type[Ledger]) -> Ledger:
        contract_name = container.__name__
        if self.get_deployment(contract_name) is not None:
            raise ValueError(f"{contract_name} was already deployed in this session.")

        resolved_params = self.constructor_parameters.resolve(contract_name)
        if not self._autosign:
            _confirm_resolution(resolved_params, contract_name)

        deployer_account = self.get_account()
        address = compute_contract_address(
            deployer=deployer_account.address,
            chain_id=self.chain_id,
            contract_name=contract_name,
            nonce=len(self.__DEPLOYMENTS),
        )
        instance = container(*resolved_params.values(), sender=deployer_account, address=address)
        self.__DEPLOYMENTS[contract_name] = instance
        print(f"Deployed {contract_name} at {address}")
        return instance

    def finalize(self, deployments: List[Ledger]) -> Path:
        """
        Publishes the deployments to the registry.
        """
        return registry_from_deployments(
            deployments=deployments,
            output_filepath=self.registry_filepath,
            chain_id=self.chain_id,
            deployer=self.get_account().address,
        )

    def _print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Config: {self.path}",
            f"Registry: {self.registry_filepath}",
            f"Network: {CHAIN_NAMES.get(self.chain_id, 'unknown')}",
            f"Chain ID: {self.chain_id}",
            sep="\n",
        )
