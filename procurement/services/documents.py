# documents.py
# Documents hang off a project, RFQ, quote or requirement (see DocumentRef).

import logging
import mimetypes
from typing import List, Optional

from ..api import ApiClient
from ..models import Document, DocumentRef, parse, parse_list

logger = logging.getLogger(__name__)


def _ref(ref) -> DocumentRef:
    if isinstance(ref, DocumentRef):
        return ref
    kind, entity_id = ref
    return DocumentRef.of(kind, entity_id)


def upload_document(client: ApiClient, ref, filename: str, content: bytes,
                    mime_type: Optional[str] = None) -> Document:
    ref = _ref(ref)
    mime_type = mime_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    body = client.request(
        "POST", "/documents/upload",
        data={"entity_type": ref.kind.value, "entity_id": str(ref.id)},
        files={"file": (filename, content, mime_type)},
    )
    document = parse(Document, body.get("document"))
    logger.info("Uploaded %s to %s %s", filename, ref.kind.value, ref.id)
    return document


def get_documents_by_entity(client: ApiClient, ref) -> List[Document]:
    ref = _ref(ref)
    body = client.get(f"/documents/{ref.kind.value}/{ref.id}")
    return parse_list(Document, body.get("documents"))


def delete_document(client: ApiClient, document_id: int) -> dict:
    return client.delete(f"/documents/{document_id}")


def download_document(client: ApiClient, document_id: int) -> bytes:
    return client.get(f"/documents/download/{document_id}", raw=True)
