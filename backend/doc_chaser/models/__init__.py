from doc_chaser.models.document_request import DocumentRequest

__all__ = ["DocumentRequest"]
