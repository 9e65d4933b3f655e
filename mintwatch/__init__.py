# MIT License
# Copyright (c) 2025 Hashborn

"""
mintwatch - Minter masternode watcher.

Polls the validator set of a Minter node, alerts owners whose masternode left
the validator list and signs SetCandidateOnline/Offline transactions.
"""

__version__ = "0.3.0"
