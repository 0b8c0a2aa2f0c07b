"""Chain RPC collaborator: protocol plus mock and web3-backed clients."""

from .abi import ERC20_METADATA_ABI, STATE_VIEW_ABI
from .client import ChainRpc, MockChainRpc, MockPoolState, TokenMetadata, Web3ChainRpc

__all__ = [
    "ChainRpc",
    "MockChainRpc",
    "MockPoolState",
    "TokenMetadata",
    "Web3ChainRpc",
    "STATE_VIEW_ABI",
    "ERC20_METADATA_ABI",
]
