from .core import Beacon, ChainInfo, ChainInfoMetadata, RoundNumber, SchemeID

__all__ = ["Beacon", "ChainInfo", "ChainInfoMetadata", "RoundNumber", "SchemeID"]
