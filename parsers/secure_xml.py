"""Hardened XML parsing for Final Draft documents.

Every FDX file goes through ``parse_xml_safe``: ``defusedxml`` refuses DTD
entity definitions and external references, so XXE and entity-expansion
payloads are reported as ``MalformedXml`` like any other broken document.
"""

import logging
from xml.etree.ElementTree import Element

from defusedxml import ElementTree as SafeET
from defusedxml.common import DefusedXmlException, DTDForbidden, EntitiesForbidden

from core.exceptions import ExtractionException
from core.models import ErrorCode

logger = logging.getLogger(__name__)

# Checked in order; DefusedXmlException is the base of the other two
_REJECTIONS: list[tuple[type[Exception], str]] = [
    (DTDForbidden, "dtd_forbidden"),
    (EntitiesForbidden, "entities_forbidden"),
    (DefusedXmlException, "external_reference_forbidden"),
    (SafeET.ParseError, "parse_error"),
]


def _rejection_reason(exc: Exception) -> str:
    for exc_type, reason in _REJECTIONS:
        if isinstance(exc, exc_type):
            return reason
    return "unknown"


def parse_xml_safe(content: bytes, *, max_size: int) -> Element:
    """Parse *content* into an element tree.

    *max_size* is the upload ceiling in bytes; larger documents raise
    ``FileTooLarge`` before any parsing happens.  Everything the parser
    rejects raises ``MalformedXml`` with the rejection in ``details``.
    """
    if len(content) > max_size:
        raise ExtractionException(
            ErrorCode.FILE_TOO_LARGE,
            f"FDX document is {len(content)} bytes, limit is {max_size}",
            details={"size": len(content), "max_size": max_size},
        )

    try:
        return SafeET.fromstring(content)
    except Exception as exc:
        reason = _rejection_reason(exc)
        if reason == "unknown":
            logger.warning("Unexpected XML parser failure: %s", exc)
        raise ExtractionException(
            ErrorCode.MALFORMED_XML,
            f"FDX document rejected by the XML parser ({reason})",
            details={"reason": reason},
        )
