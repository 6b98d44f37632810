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
File system utilities for MP3 Auto Tagger
Handles path resolution, path validation and upload file checks
"""
import os
import time

from werkzeug.utils import secure_filename

from config import AUDIO_EXTENSIONS, ALLOWED_UPLOAD_MIME_TYPES
from core.errors import InvalidPathError, ValidationError


def resolve_path(filepath, base_dir):
    """Resolve a relative path against base_dir; absolute paths are kept"""
    if not filepath or not isinstance(filepath, str):
        raise ValidationError('File path is required')
    if not os.path.isabs(filepath):
        filepath = os.path.join(base_dir, filepath)
    return os.path.abspath(filepath)


def validate_path(filepath, base_dir):
    """Resolve a path and make sure it stays within base_dir"""
    abs_path = resolve_path(filepath, base_dir)
    abs_base = os.path.abspath(base_dir)
    if os.path.commonpath([abs_path, abs_base]) != abs_base:
        raise InvalidPathError('Invalid path')
    return abs_path


def is_mp3_upload(filename, mimetype=None):
    """Accept uploads declared as MPEG audio or carrying an .mp3 extension"""
    if mimetype in ALLOWED_UPLOAD_MIME_TYPES:
        return True
    return bool(filename) and filename.lower().endswith(AUDIO_EXTENSIONS)


def upload_filename(original_name):
    """Name an upload is stored under: '<milliseconds>-<safe original name>'"""
    safe_name = secure_filename(original_name or '') or 'upload.mp3'
    return f"{int(time.time() * 1000)}-{safe_name}"
