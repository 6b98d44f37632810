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
Error types for MP3 Auto Tagger
Each error carries the HTTP status the single-file endpoints answer with
"""


class TaggerError(Exception):
    """Base class for all tagging pipeline errors"""
    status_code = 500


class ValidationError(TaggerError):
    """A request or batch item is missing a required field"""
    status_code = 400


class InvalidPathError(ValidationError):
    """A path resolves outside the storage directory"""
    status_code = 403


class NotFoundError(TaggerError):
    """The target path does not exist"""
    status_code = 404

    def __init__(self, path, message='File not found'):
        super().__init__(message)
        self.path = path


class CollisionError(TaggerError):
    """A rename target is already occupied by another file"""
    status_code = 409

    def __init__(self, path, message='A file with this name already exists'):
        super().__init__(message)
        self.path = path


class WriteFailure(TaggerError):
    """The ID3 writer failed or raised"""


class RenameFailure(TaggerError):
    """The operating system refused the rename"""


class EmptyResultError(ValidationError):
    """A file name resolves to nothing after substitution and sanitization"""


class UnsupportedSourceError(TaggerError):
    """Cover art source that cannot be embedded (remote URLs)"""
    status_code = 400
