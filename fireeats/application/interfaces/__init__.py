"""Application interfaces (ports): document store protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from fireeats.infrastructure or fireeats.api.
"""

from fireeats.application.interfaces.store import (
    CollectionReference,
    DocumentReference,
    DocumentStore,
    Query,
    Transaction,
    TransactionFunction,
)

__all__ = [
    "CollectionReference",
    "DocumentReference",
    "DocumentStore",
    "Query",
    "Transaction",
    "TransactionFunction",
]
