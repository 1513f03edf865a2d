from collections import OrderedDict
from pathlib import Path

import deployment
from yogi.constants import PREDEFINED_TOKEN_TYPES

#
# Filesystem
#

DEPLOYMENT_DIR = Path(deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

#
# Chains
#

LOCAL = "local"

CHAIN_NAMES = {
    1: "ethereum mainnet",
    11155111: "ethereum sepolia",
    1337: LOCAL,
    31337: LOCAL,
}

LOCAL_CHAIN_IDS = [chain_id for chain_id, name in CHAIN_NAMES.items() if name == LOCAL]

#
# Accounts
#

DEPLOYER_PRIVATE_KEY_ENVVAR = "YOGI_DEPLOYER_PRIVATE_KEY"
TEST_MNEMONIC = "test test test test test test test test test test test junk"
TEST_ACCOUNTS_PATH = "m/44'/60'/0'/0/{}"
NUMBER_OF_TEST_ACCOUNTS = 10

#
# Metadata
#

IPFS_BASE_URI = "https://ipfs.io/ipfs/QmYogi/"
GITHUB_METADATA_BASE_URI = (
    "https://raw.githubusercontent.com/EpixZone/contract_examples/main/metadata/"
)

#
# YogiMultiToken custom token types created at deployment
#

YOGI_SPECIAL_EDITION = 6
YOGI_SPECIAL_EDITION_NAME = "Yogi Special Edition"
YOGI_SPECIAL_EDITION_MAX_SUPPLY = 50
YOGI_SPECIAL_EDITION_METADATA = "yogi_special.json"

#
# YogiNFTCollection sample token minted at deployment
#

SAMPLE_NFT_URI = "1.json"

#
# YogiMultiToken metadata documents, by token type id
#

TOKEN_METADATA = OrderedDict(
    (token_type.token_id, (token_type.name, token_type.metadata_filename))
    for token_type in PREDEFINED_TOKEN_TYPES
)
TOKEN_METADATA[YOGI_SPECIAL_EDITION] = (YOGI_SPECIAL_EDITION_NAME, YOGI_SPECIAL_EDITION_METADATA)
