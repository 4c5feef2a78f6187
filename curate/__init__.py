"""Client-side fee engine and actions for Light Generalized TCR registries."""

from .core.chains import CHAINS, SupportedChain
from .services import FeeCalculator, IpfsClient, LightCurateRegistry

__all__ = [
    "CHAINS",
    "FeeCalculator",
    "IpfsClient",
    "LightCurateRegistry",
    "SupportedChain",
]
