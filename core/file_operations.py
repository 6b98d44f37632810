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
File operations for MP3 Auto Tagger
Performs the per-file I/O: writing tags, renaming and exporting metadata
"""
import os
from dataclasses import dataclass

from config import ID3_VERSION, MAX_FILENAME_LENGTH, logger as default_logger
from core.errors import (
    NotFoundError, CollisionError, WriteFailure, RenameFailure,
    EmptyResultError, ValidationError
)
from core.file_utils import resolve_path, validate_path
from core.naming.sanitizer import sanitize
from core.metadata.writer import write_tag_set
from core.metadata.exporter import build_export_record


@dataclass
class RenameOutcome:
    old_path: str
    new_path: str
    original_name: str
    new_name: str

    def to_dict(self):
        return {
            'oldPath': self.old_path,
            'newPath': self.new_path,
            'originalName': self.original_name,
            'newName': self.new_name
        }


class FileOperationExecutor:
    """
    Runs one file operation at a time against files under base_dir

    Every failure is raised as a TaggerError subclass scoped to the one
    file, so a caller processing a list can record it and move on.
    """

    def __init__(self, base_dir, logger=None, id3_version=ID3_VERSION,
                 max_name_length=MAX_FILENAME_LENGTH, restrict_to_base=True):
        self.base_dir = base_dir
        self.logger = logger or default_logger
        self.id3_version = id3_version
        self.max_name_length = max_name_length
        self.restrict_to_base = restrict_to_base

    def resolve(self, filepath):
        if self.restrict_to_base:
            return validate_path(filepath, self.base_dir)
        return resolve_path(filepath, self.base_dir)

    def exists(self, filepath):
        return os.path.isfile(self.resolve(filepath))

    def write_tags(self, filepath, tag_set):
        """
        Write a tag set into an existing MP3 file

        Returns:
            str: Resolved path that was written

        Raises:
            NotFoundError: If the file does not exist
            WriteFailure: If Mutagen or the filesystem fails
        """
        path = self.resolve(filepath)
        if not os.path.isfile(path):
            raise NotFoundError(filepath)

        try:
            write_tag_set(path, tag_set, self.id3_version)
        except Exception as e:
            self.logger.error(f"Failed to write ID3 tags to {path}: {e}")
            raise WriteFailure(str(e) or 'Failed to write ID3 tags') from e

        return path

    def rename_file(self, filepath, new_name, sanitize_name=True):
        """
        Rename a file within its directory, keeping its extension

        Args:
            filepath: File to rename
            new_name: New base name; a trailing copy of the current extension is ignored
            sanitize_name: Replace characters that are unsafe in file names

        Returns:
            RenameOutcome

        Raises:
            NotFoundError, CollisionError, EmptyResultError, ValidationError, RenameFailure
        """
        path = self.resolve(filepath)
        if not os.path.isfile(path):
            raise NotFoundError(filepath)

        directory, original_name = os.path.split(path)
        extension = os.path.splitext(original_name)[1]

        name = str(new_name or '')
        if extension and name.lower().endswith(extension.lower()):
            name = name[:-len(extension)]

        if sanitize_name:
            name = sanitize(name, self.max_name_length)
        elif '/' in name or '\\' in name:
            raise ValidationError('Invalid filename')

        if not name.strip():
            raise EmptyResultError('New file name is empty after sanitization')

        new_path = os.path.join(directory, name + extension)

        # No overwrite, ever; a case-only rename of the same file is allowed
        if os.path.exists(new_path) and not os.path.samefile(path, new_path):
            raise CollisionError(new_path)

        try:
            os.rename(path, new_path)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error renaming {original_name}: {e}")
            raise RenameFailure(str(e)) from e

        self.logger.info(f"Renamed {original_name} -> {name + extension}")
        return RenameOutcome(path, new_path, original_name, name + extension)

    def export_metadata(self, record):
        """Serializable metadata export for one file record (no file access)"""
        return build_export_record(record)
