import logging

from bikya.api_client import api_request, require_token
from bikya.custom_types import DocumentStatus
from bikya.models import UserDocument

DOCUMENTS_PATH = "/documents/me"
DRIVERS_LICENSE = "drivers_license"
LICENSE_SIDES = ("front", "back")

logger = logging.getLogger(__name__)


def fetch_user_documents(token: str | None) -> list[UserDocument]:
    token = require_token(token, "Authentication token not provided.")
    logger.debug("Fetching documents of the logged in user")
    documents = api_request("GET", DOCUMENTS_PATH, token=token)
    if not isinstance(documents, list):
        return []
    return [UserDocument.model_validate(document) for document in documents]


def is_license_verified(documents: list[UserDocument] | None) -> bool:
    """Both sides of the driver's license have to be approved.

    The newest upload of each side counts, the backend lists newest first.
    """
    if not documents:
        return False
    for side in LICENSE_SIDES:
        latest = next(
            (
                doc
                for doc in documents
                if doc.document_type == DRIVERS_LICENSE and doc.document_side == side
            ),
            None,
        )
        if latest is None or latest.status != DocumentStatus.APPROVED.value:
            return False
    return True
