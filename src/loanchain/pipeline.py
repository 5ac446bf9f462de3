"""Upload pipeline - one extraction attempt from PDF to ExtractionResult.

1. Extracts the page text (page cap from settings) in a worker thread
2. Routes the text to the local pattern engine or the remote model
3. Returns the normalized result, raising DocumentRejected when the remote
   model judged the document not to be a loan agreement

The whole attempt is one awaitable; cancelling the awaiting task cancels an
in-flight remote request.
"""

from typing import Optional, Union

from .common.config import Settings, get_settings
from .common.exceptions import DocumentRejected
from .common.models import ExtractionMode, ExtractionResult
from .common.safe_log import safe_log
from .extraction.router import ExtractionRouter
from .extraction.text_extractor import DocumentSource, document_name, extract_text_async


async def analyze_document(
    source: DocumentSource,
    mode: Optional[Union[ExtractionMode, str]] = None,
    api_key: Optional[str] = None,
    settings: Optional[Settings] = None,
    router: Optional[ExtractionRouter] = None,
    reject_invalid: bool = True,
) -> ExtractionResult:
    """Extract deal terms from a PDF.

    Args:
        source: Path, bytes or binary stream of the PDF
        mode: local or remote; defaults to ``settings.mode``
        api_key: Remote credential; defaults to ``settings.groq_api_key``
        settings: Settings to use (global settings when omitted)
        router: Router to use (built from settings when omitted)
        reject_invalid: Raise DocumentRejected for invalid results

    Raises:
        DocumentUnreadable: the PDF cannot be opened
        RemoteExtractionFailed: the remote extractor failed
        DocumentRejected: the remote extractor rejected the document
    """
    settings = settings or get_settings()
    # Read once here and passed down as values
    mode = mode or settings.mode
    api_key = api_key or settings.groq_api_key
    router = router or ExtractionRouter.from_settings(settings)
    name = document_name(source)

    safe_log("Analyzing document", document=name, max_pages=settings.max_pages)
    text = await extract_text_async(source, settings.max_pages)
    result = await router.extract(text, mode, api_key=api_key, document_name=name)

    if not result.is_valid and reject_invalid:
        raise DocumentRejected(result.reason, document_id=name)
    return result
