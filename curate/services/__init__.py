"""Chain-facing services: fee engine, registry actions, and IPFS storage."""

from .fees import FeeCalculator, split_appeal_fees
from .gateway import ChainGateway
from .ipfs import IpfsClient
from .registry import LightCurateRegistry

__all__ = [
    "ChainGateway",
    "FeeCalculator",
    "IpfsClient",
    "LightCurateRegistry",
    "split_appeal_fees",
]
