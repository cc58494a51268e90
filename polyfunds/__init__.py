"""Off-chain ledger for tokenized real-world business investments."""

__version__ = "0.1.0"
