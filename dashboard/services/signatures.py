"""
Signature pad captures arrive as ``data:image/png;base64,...`` URLs.
"""
from __future__ import annotations

import base64
import binascii
import re

from django.conf import settings

_DATA_URL = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w-]+=[\w.-]+)*)(?P<b64>;base64)?,(?P<data>.*)$', re.S)
PNG_MAGIC = b'\x89PNG\r\n\x1a\n'

SIGNATURE_FILES = {
    'admin': ('signature', 'signature.png'),
    'service_user': ('suSignature', 'su_signature.png'),
}


class InvalidSignature(ValueError):
    pass


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """Return ``(mime type, raw bytes)`` of a base64 data URL."""
    m = _DATA_URL.match((data_url or '').strip())
    if not m or not m.group('b64'):
        raise InvalidSignature('Signature must be a base64 data URL.')
    try:
        raw = base64.b64decode(m.group('data'), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSignature('Signature data is not valid base64.') from exc
    return (m.group('mime') or 'text/plain'), raw


def decode_signature(data_url: str) -> bytes:
    mime, raw = decode_data_url(data_url)
    if mime != 'image/png' or not raw.startswith(PNG_MAGIC):
        raise InvalidSignature('Signature must be a PNG image.')
    if len(raw) > settings.UPLOAD_MAX_MB * 1024 * 1024:
        raise InvalidSignature('Signature image is too large.')
    return raw
