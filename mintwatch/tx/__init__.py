# MIT License
# Copyright (c) 2025 Hashborn

"""
SetCandidateOnline / SetCandidateOffline: build, sign, submit.
"""

from .builder import ActivationIntent, SignedTransaction, TransactionBuilder
from .submitter import TransactionSubmitter
from .switch import CandidateSwitch, parse_switch_argument

__all__ = [
    "ActivationIntent",
    "SignedTransaction",
    "TransactionBuilder",
    "TransactionSubmitter",
    "CandidateSwitch",
    "parse_switch_argument",
]
