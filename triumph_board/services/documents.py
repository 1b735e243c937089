"""Conversion of stored documents into models."""
import logging
from typing import Callable, Iterable, TypeVar

from pydantic import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def convert_documents(docs: Iterable[dict], convert: Callable[[dict], T], kind: str) -> list[T]:
    """
    Convert documents with ``convert``, skipping any that do not validate.

    A skipped document is logged with its ID so one bad row cannot hide the
    rest of a list.

    Args:
        docs: Documents read from a collection
        convert: The service's ``_doc_to_*`` converter
        kind: Entity name used in the log message

    Returns:
        Models for every document that converted
    """
    models = []
    for doc in docs:
        try:
            models.append(convert(doc))
        except (ValidationError, KeyError) as e:
            logger.warning(f"Skipping unreadable {kind} {doc.get('_id')}: {e!r}")
    return models
