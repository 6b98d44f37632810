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
JSON export of track metadata for MP3 Auto Tagger
"""
import os
import json

from config import logger
from core.naming.sanitizer import sanitize

TEXT_EXPORT_FIELDS = ('title', 'genre', 'subgenre', 'technical', 'creative', 'lyrics', 'language')
LIST_EXPORT_FIELDS = ('keywords', 'mood', 'usage')
DEFAULT_EXPORT_NAME = 'export'


def export_fields(metadata):
    """Select the exported subset of a metadata dict"""
    metadata = metadata or {}
    result = {}
    for name in TEXT_EXPORT_FIELDS:
        result[name] = metadata.get(name) or ''
    for name in LIST_EXPORT_FIELDS:
        result[name] = metadata.get(name) or []
    result['song'] = metadata.get('song') or 1
    # Keep the client's field order
    return {key: result[key] for key in (
        'title', 'genre', 'subgenre', 'technical', 'creative',
        'keywords', 'mood', 'usage', 'lyrics', 'language', 'song'
    )}


def build_export_record(record):
    """
    Build the serializable export for one uploaded file record

    Args:
        record: Dict with originalName/filePath, duration, createdAt and
            either 'metadata' or the raw 'analysis'

    Returns:
        dict: {originalName, duration, createdAt, metadata}
    """
    source = record.get('filePath') or record.get('path') or ''
    return {
        'originalName': record.get('originalName') or os.path.basename(source),
        'duration': record.get('duration') or 0,
        'createdAt': record.get('createdAt'),
        'metadata': export_fields(record.get('metadata') or record.get('analysis')),
    }


def save_export_json(data, filename, exports_dir):
    """
    Write export data as pretty-printed JSON into the exports directory

    Returns:
        str: Path of the written file
    """
    name = sanitize(filename or '') or DEFAULT_EXPORT_NAME
    if name.lower().endswith('.json'):
        name = name[:-5]
    json_path = os.path.join(exports_dir, f"{name}.json")

    with open(json_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info(f"Exported metadata to {json_path}")
    return json_path
