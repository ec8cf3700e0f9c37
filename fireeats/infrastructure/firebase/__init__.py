"""Firestore integration over the REST API."""

from fireeats.infrastructure.firebase._rest_client import (
    FirestoreCollectionReference,
    FirestoreDocumentReference,
    FirestoreQuery,
    FirestoreRESTClient,
    FirestoreTransaction,
)
from fireeats.infrastructure.firebase.client import (
    close_firestore,
    get_firestore_client,
    init_firestore,
)

__all__ = [
    "FirestoreCollectionReference",
    "FirestoreDocumentReference",
    "FirestoreQuery",
    "FirestoreRESTClient",
    "FirestoreTransaction",
    "close_firestore",
    "get_firestore_client",
    "init_firestore",
]
