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
File name sanitization for MP3 Auto Tagger
"""
import re

FORBIDDEN_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')
WHITESPACE_RUN = re.compile(r'\s+')


def collapse_whitespace(value):
    """Collapse whitespace runs to a single space and trim"""
    return WHITESPACE_RUN.sub(' ', value).strip()


def sanitize(name, max_length=None):
    """
    Turn an arbitrary string into a safe file name fragment

    Args:
        name: User supplied name
        max_length: Optional cap on the result length (characters)

    Returns:
        str: Name with \\ / : * ? " < > | and control characters replaced
        by '_' and whitespace collapsed. May be empty.
    """
    if name is None:
        return ''

    result = collapse_whitespace(FORBIDDEN_CHARS.sub('_', str(name)))

    if max_length and len(result) > max_length:
        result = result[:max_length].rstrip()

    return result
