"""
Good4Work NFT Tools - Contract Minting

Thin wrapper around web3 for calling ``safeMint(recipient, tokenURI)`` on a
deployed Good4Work ERC-721 contract.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from web3 import Web3
from web3.providers.rpc import HTTPProvider

from .exceptions import ConfigurationError, MintError, ValidationError


@dataclass
class MintResult:
    """Result of a confirmed mint transaction."""

    tx_hash: str
    block_number: int
    token_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_hash": self.tx_hash,
            "block_number": self.block_number,
            "token_id": self.token_id
        }


def load_contract_abi(abi_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Load a contract ABI from a build artifact or a bare ABI file.

    Accepts forge/hardhat artifacts (``{"abi": [...]}``) and plain ABI lists.

    Raises:
        ConfigurationError: If the file is missing, unreadable or has no ABI
    """
    path = Path(abi_path)
    if not path.exists():
        raise ConfigurationError(
            f"Contract ABI not found: {path}. Run 'forge build' to generate it."
        )

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Error loading contract ABI from {path}: {e}") from e

    abi = data.get('abi') if isinstance(data, dict) else data
    if not isinstance(abi, list):
        raise ConfigurationError(f"No ABI found in {path}")

    return abi


class NFTMinter:
    """Signs and sends mint transactions to an ERC-721 contract."""

    def __init__(self, rpc_url: str, private_key: str, contract_address: str,
                 abi: List[Dict[str, Any]], web3: Optional[Web3] = None):
        if not Web3.is_address(contract_address):
            raise ValidationError(f"Invalid contract address: {contract_address}")
        if not private_key:
            raise ConfigurationError("A private key is required for signing transactions")

        self.logger = logging.getLogger(__name__)
        self.w3 = web3 or Web3(HTTPProvider(rpc_url))
        self.account = self.w3.eth.account.from_key(private_key)
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=abi
        )

    def mint(self, recipient: str, token_uri: str, gas: Optional[int] = None,
             timeout: float = 120) -> MintResult:
        """
        Mint a token to the recipient with the given token URI.

        Args:
            recipient: Recipient Ethereum address
            token_uri: Metadata URI stored on-chain (ipfs://...)
            gas: Optional gas limit, estimated by the node when omitted
            timeout: Seconds to wait for the receipt

        Returns:
            MintResult with transaction hash and minted token id

        Raises:
            ValidationError: If the recipient address is invalid
            MintError: If the transaction reverts
        """
        if not Web3.is_address(recipient):
            raise ValidationError(f"Invalid recipient address: {recipient}")

        tx_params = {
            'from': self.account.address,
            'nonce': self.w3.eth.get_transaction_count(self.account.address),
        }
        if gas:
            tx_params['gas'] = gas

        transaction = self.contract.functions.safeMint(
            Web3.to_checksum_address(recipient), token_uri
        ).build_transaction(tx_params)

        signed = self.account.sign_transaction(transaction)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        self.logger.info(f"Mint transaction submitted: {Web3.to_hex(tx_hash)}")

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        if receipt['status'] == 0:
            raise MintError(f"Mint transaction reverted: {Web3.to_hex(tx_hash)}")

        return MintResult(
            tx_hash=Web3.to_hex(tx_hash),
            block_number=receipt['blockNumber'],
            token_id=self._extract_token_id(receipt)
        )

    def _extract_token_id(self, receipt) -> Optional[int]:
        events = self.contract.events.Transfer().process_receipt(receipt)
        if not events:
            self.logger.warning("No Transfer event found in mint receipt")
            return None
        return int(events[0]['args']['tokenId'])
