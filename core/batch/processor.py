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
Batch file processing operations for MP3 Auto Tagger
Handles bulk tag writes, renames and exports over a list of files
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Dict, List

from config import logger as default_logger
from core.errors import ValidationError, NotFoundError
from core.album_art.loader import load_cover_image
from core.metadata.tag_mapper import build_tag_set
from core.naming.template import render, resolve_template


class BatchOperation(Enum):
    """Operations a batch can apply to each file"""
    WRITE_TAGS = "write_tags"
    RENAME = "rename"
    EXPORT_JSON = "export_json"


@dataclass
class BatchResult:
    """Outcome of one batch: successes and per-file errors, in input order"""
    operation: BatchOperation
    results: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total(self):
        return len(self.results) + len(self.errors)

    def logs(self):
        return {
            'message': f"{self.operation.value}: {len(self.results)} succeeded, {len(self.errors)} failed",
            'details': f"Batch processing finished for {self.total} files"
        }

    def to_dict(self):
        return {
            'results': self.results,
            'errors': self.errors
        }


class BatchCoordinator:
    """
    Applies one operation to every item of a batch, strictly in order

    A failing item is recorded in errors and the loop moves on; nothing
    short of a malformed request stops a batch early.
    """

    def __init__(self, executor, logger=None, tag_mapper=build_tag_set):
        self.executor = executor
        self.logger = logger or default_logger
        self.tag_mapper = tag_mapper
        self.image_loader = partial(load_cover_image, base_dir=executor.base_dir)
        self._handlers = {
            BatchOperation.WRITE_TAGS: self._write_tags,
            BatchOperation.RENAME: self._rename,
            BatchOperation.EXPORT_JSON: self._export,
        }

    def run_batch(self, items, operation):
        """
        Process every item with the given operation

        Args:
            items: List of {filePath, metadata | newName, options?} dicts
            operation: BatchOperation or its value

        Returns:
            BatchResult

        Raises:
            ValidationError: If items is not a non-empty list
        """
        if not isinstance(items, list) or not items:
            raise ValidationError('No files specified for batch processing')

        operation = BatchOperation(operation)
        handler = self._handlers[operation]
        batch = BatchResult(operation)
        total = len(items)

        self.logger.info(f"Starting batch {operation.value} for {total} files")

        for index, item in enumerate(items, 1):
            file_path = item.get('filePath') if isinstance(item, dict) else None
            self.logger.info(f"[{operation.value}] File {index}/{total}: {os.path.basename(file_path or '')}")
            try:
                batch.results.append(handler(item))
            except Exception as e:
                self.logger.error(f"[{operation.value}] Error processing {file_path}: {e}")
                batch.errors.append({'filePath': file_path, 'error': str(e) or type(e).__name__})

        self.logger.info(f"Batch {operation.value} finished: {len(batch.results)} succeeded, {len(batch.errors)} failed")
        return batch

    def write_tags_batch(self, items):
        return self.run_batch(items, BatchOperation.WRITE_TAGS)

    def rename_batch(self, items):
        return self.run_batch(items, BatchOperation.RENAME)

    def export_batch(self, items):
        return self.run_batch(items, BatchOperation.EXPORT_JSON)

    def _require(self, item, key, message):
        if not isinstance(item, dict):
            raise ValidationError('Batch item must be an object')
        value = item.get(key)
        if value is None or value == '':
            raise ValidationError(message)
        return value

    def _require_existing(self, file_path):
        if not self.executor.exists(file_path):
            raise NotFoundError(file_path)

    def _write_tags(self, item):
        file_path = self._require(item, 'filePath', 'File path not specified')
        metadata = self._require(item, 'metadata', 'Metadata not specified')
        self._require_existing(file_path)

        tag_set = self.tag_mapper(metadata, single_file=False,
                                  image_loader=self.image_loader, logger=self.logger)
        self.executor.write_tags(file_path, tag_set)
        return {'filePath': file_path, 'success': True}

    def _rename(self, item):
        file_path = self._require(item, 'filePath', 'File path or new name not specified')
        options = item.get('options') or {}

        if options.get('useTemplate') and options.get('template'):
            metadata = item.get('metadata') or options.get('metadata')
            if not metadata:
                raise ValidationError('Metadata not specified for naming template')
            new_name = render(resolve_template(options['template']), metadata)
        else:
            new_name = self._require(item, 'newName', 'File path or new name not specified')

        self._require_existing(file_path)
        return self.executor.rename_file(file_path, new_name).to_dict()

    def _export(self, item):
        file_path = self._require(item, 'filePath', 'File path not specified')
        metadata = self._require(item, 'metadata', 'Metadata not specified')

        exported = self.executor.export_metadata({'filePath': file_path, 'metadata': metadata})
        return {
            'filePath': file_path,
            'originalName': exported['originalName'],
            'metadata': exported['metadata']
        }
