"""Extraction Router - local pattern engine vs. remote model.

The mode is an explicit argument of every call; the router holds no mutable
mode state that could change between the decision and the extraction.

Local extraction cannot reject a document: nonsense text still yields a
valid, fully defaulted result. Only the remote path can answer
``isValid = false``. Remote failures propagate as RemoteExtractionFailed and
are never replaced by a defaulted local result.
"""

from datetime import date
from typing import Any, Optional, Union

from ..common.config import Settings
from ..common.exceptions import ConfigurationError
from ..common.models import ExtractionMode, ExtractionResult
from ..common.safe_log import safe_log
from .covenants import extract_covenants
from .normalizer import normalize_local, normalize_remote
from .patterns import extract_fields
from .remote import create_remote_extractor


def extract_local(
    text: str,
    document_name: Optional[str] = None,
    today: Optional[date] = None,
) -> ExtractionResult:
    """Run the pattern engine, covenant locator and participant synthesizer."""
    fields = extract_fields(text, today=today)
    covenants = extract_covenants(text)
    safe_log(
        "Local extraction complete",
        matched=fields.matched,
        covenants=len(covenants),
    )
    return normalize_local(fields, covenants, document_name=document_name)


def _coerce_mode(mode: Union[ExtractionMode, str]) -> ExtractionMode:
    try:
        return ExtractionMode(mode)
    except ValueError as e:
        raise ConfigurationError(f"Unknown extraction mode: {mode}", cause=e) from e


class ExtractionRouter:
    """Chooses the extraction path per call.

    Args:
        remote_extractor: Object with ``async extract(text, api_key) -> dict``;
            only needed for remote mode
    """

    def __init__(self, remote_extractor: Any = None):
        self.remote_extractor = remote_extractor

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExtractionRouter":
        return cls(remote_extractor=create_remote_extractor(settings))

    async def extract(
        self,
        text: str,
        mode: Union[ExtractionMode, str],
        api_key: Optional[str] = None,
        document_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ExtractionResult:
        """Extract deal terms from the text buffer.

        Raises:
            ConfigurationError: unknown mode, or remote mode without a usable extractor/key
            RemoteExtractionFailed: the remote call failed or answered malformed data
        """
        mode = _coerce_mode(mode)
        safe_log("Routing extraction", mode=mode.value, chars=len(text))

        if mode is ExtractionMode.LOCAL:
            return extract_local(text, document_name=document_name, today=today)

        if self.remote_extractor is None:
            raise ConfigurationError("Remote extraction requested but no remote extractor is configured")
        if getattr(self.remote_extractor, "requires_api_key", True) and not api_key:
            raise ConfigurationError("Remote extraction requires an API key")

        payload = await self.remote_extractor.extract(text, api_key)
        result = normalize_remote(payload)
        if result.metadata is not None and document_name:
            result.metadata.name = document_name
        return result
