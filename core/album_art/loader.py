# MP3 Auto Tagger - AI-assisted MP3 metadata tagger
# Copyright (C) 2025 Dr. William Nelson Leonard
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Album art loading for MP3 Auto Tagger
Turns a cover art reference (data URI or local file) into embeddable image bytes
"""
import re
import base64
import binascii
from io import BytesIO

from PIL import Image

from core.errors import UnsupportedSourceError
from core.file_utils import validate_path
from core.metadata.models import CoverImage

DEFAULT_MIME_TYPE = 'image/jpeg'
DATA_URI = re.compile(r'^data:([^;,]+)(?:;[^;,]+)*;base64,(.*)$', re.DOTALL)


def is_remote_url(source):
    return source.lower().startswith(('http://', 'https://'))


def detect_mime_type(image_data):
    """Identify the image format with Pillow, JPEG when it cannot tell"""
    try:
        with Image.open(BytesIO(image_data)) as img:
            return Image.MIME.get(img.format, DEFAULT_MIME_TYPE)
    except OSError:
        return DEFAULT_MIME_TYPE


def decode_data_uri(source):
    """
    Split a data URI into its mime type and decoded bytes

    Raises:
        ValueError: If the URI is malformed or the payload is not base64
    """
    match = DATA_URI.match(source.strip())
    if not match:
        raise ValueError('Malformed data URI')

    mime_type, payload = match.groups()
    try:
        data = base64.b64decode(re.sub(r'\s+', '', payload), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload in data URI: {e}")

    return mime_type, data


def load_cover_image(source, description='Cover', base_dir=None):
    """
    Load cover art for embedding

    Args:
        source: 'data:<mime>;base64,<payload>' or a local file path
        description: APIC description to use
        base_dir: Storage directory local paths are resolved against and must stay inside

    Returns:
        CoverImage

    Raises:
        UnsupportedSourceError: For http(s) URLs, which are never downloaded,
            non-string sources, and local paths when no base_dir is given
        InvalidPathError: If a local path resolves outside base_dir
        ValueError: For malformed data URIs
        OSError: If a local file cannot be read
    """
    if not isinstance(source, str):
        raise UnsupportedSourceError(f"Unsupported cover art value of type {type(source).__name__}")

    if source.startswith('data:'):
        mime_type, data = decode_data_uri(source)
        return CoverImage(mime_type=mime_type, data=data, description=description)

    if is_remote_url(source):
        raise UnsupportedSourceError(f"Remote cover art URLs are not supported: {source[:100]}")

    if not base_dir:
        raise UnsupportedSourceError('Local cover art needs a storage directory')
    path = validate_path(source, base_dir)

    with open(path, 'rb') as f:
        data = f.read()

    return CoverImage(mime_type=detect_mime_type(data), data=data, description=description)
