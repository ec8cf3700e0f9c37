"""ID generators for client-assigned document IDs."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_document_id() -> str:
    """Generate a collision-resistant document ID (CUID2).

    Document references created without an explicit ID use this so the ID
    is known before the write commits (e.g. inside a transaction).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result
