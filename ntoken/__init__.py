"""Token ledger for hierarchical NFT-style assets."""

__version__ = "1.0.0"
