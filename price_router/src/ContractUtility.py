"""ContractUtility: Web3 initialization and contract ABI loading."""

import json
import os
from pathlib import Path

from web3 import Web3
from web3.contract import Contract

from .OracleConfiguration import normalize_address

NETWORKS = {
    "mainnet": "https://ethereum-rpc.publicnode.com",
    "sepolia": "https://ethereum-sepolia-rpc.publicnode.com",
    "arbitrum": "https://arb1.arbitrum.io/rpc",
    "localnet": "http://localhost:8545",
}


class ContractUtility:
    """Utility for Web3 connection and contract ABI loading.

    :ivar network: Network RPC URL.
    :ivar w3: Configured Web3 instance.
    """

    def __init__(self, network_name: str, w3: Web3 | None = None) -> None:
        """Initialize the contract utility.

        :param network_name: Name of the network to connect to, or an RPC URL.
        :param w3: Optional pre-built Web3 instance.
        """
        # RPC_URL env var overrides the default for the network
        self.network = os.environ.get("RPC_URL") or NETWORKS.get(network_name, network_name)
        self.w3 = w3 if w3 is not None else Web3(Web3.HTTPProvider(self.network))

    @staticmethod
    def get_abi(contract_name: str) -> list:
        """Load the ABI of a contract shipped in the abi folder.

        :param contract_name: Name of the contract (e.g., "AggregatorV3Interface").
        :returns: ABI as a list of entries.
        """
        abi_path = (Path(__file__).parent / "abi" / f"{contract_name}.json").resolve()

        with open(abi_path, "r") as file:
            return json.load(file)

    def get_contract(self, address: str, contract_name: str) -> Contract:
        """Bind a deployed contract at an address to a shipped ABI.

        :param address: Contract address in any hex casing.
        :param contract_name: ABI name passed to get_abi().
        :returns: web3 contract instance.
        """
        return self.w3.eth.contract(
            address=normalize_address(address, "contract address"),
            abi=self.get_abi(contract_name),
        )
